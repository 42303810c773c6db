"""
Standardized HTTP response utilities for Lambda functions.

This module provides consistent response formatting and JSON serialization
across all API endpoints.
"""

import json
import traceback
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

from .config import get_config


class HTTPStatus(Enum):
    """HTTP status codes for API responses."""

    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500


# CORS headers for API responses
cors_headers = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


class APIJSONEncoder(json.JSONEncoder):
    """
    Custom JSON encoder for API responses that handles:
    - Decimal objects (from DynamoDB)
    - datetime objects
    - Enums and Pydantic models
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, "model_dump"):
            return obj.model_dump(by_alias=True, exclude_none=True)
        return super().default(obj)


def create_response(
    status_code: Union[int, HTTPStatus],
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    cors_enabled: bool = True,
) -> Dict[str, Any]:
    """
    Create a standardized Lambda proxy response.

    Args:
        status_code: HTTP status code
        body: Response body (JSON serialized unless already a string)
        headers: Additional headers
        cors_enabled: Whether to include CORS headers

    Returns:
        Lambda proxy response dictionary
    """
    if isinstance(status_code, HTTPStatus):
        status_code = status_code.value

    response_headers = {"Content-Type": "application/json"}

    if cors_enabled:
        response_headers.update(cors_headers)

    if headers:
        response_headers.update(headers)

    if body is None:
        serialized = ""
    elif isinstance(body, str):
        serialized = body
    else:
        serialized = json.dumps(body, cls=APIJSONEncoder)

    return {
        "statusCode": status_code,
        "headers": response_headers,
        "body": serialized,
    }


def success_response(
    data: Any = None, status_code: Union[int, HTTPStatus] = HTTPStatus.OK
) -> Dict[str, Any]:
    """Create a success response whose body is ``data`` itself."""
    return create_response(status_code, data)


def no_content_response() -> Dict[str, Any]:
    return create_response(HTTPStatus.NO_CONTENT)


def error_response(
    message: str,
    status_code: Union[int, HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR,
    error: Optional[BaseException] = None,
) -> Dict[str, Any]:
    """
    Create an error response.

    The body is ``{"message": ...}``. Outside production the stack trace of
    ``error`` is added under ``stack``.

    Args:
        message: Error message
        status_code: HTTP status code
        error: The exception being reported

    Returns:
        Lambda proxy response dictionary
    """
    body = {"message": message}

    if error is not None and not get_config().is_production:
        body["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return create_response(status_code, body)
