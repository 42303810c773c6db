"""Request input validation shared by the API handlers."""

import json
import re
from decimal import Decimal
from typing import Any, Dict, Optional, Type, TypeVar

import pydantic

from .errors import ValidationError

ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def validate_id(id_value: Optional[str]) -> str:
    """
    Validate an entity id taken from the request path.

    Raises:
        ValidationError: If the id is missing or contains characters other
            than letters, digits and dashes
    """
    if not id_value or not ID_PATTERN.match(id_value):
        raise ValidationError("Invalid ID format", details={"id": id_value})
    return id_value


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse the JSON body of an API Gateway event.

    Raises:
        ValidationError: If the body is missing, is not JSON or is not an object
    """
    body = event.get("body")
    if not body:
        raise ValidationError("No payload body")

    # DynamoDB rejects float values
    try:
        parsed = json.loads(body, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ValidationError("Invalid JSON in request body", details={"json_error": str(e)})

    if not isinstance(parsed, dict):
        raise ValidationError("Request body must be a JSON object")
    return parsed


def parse_model(model: Type[ModelT], data: Dict[str, Any], message: str) -> ModelT:
    """Validate ``data`` into ``model``, converting pydantic errors."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e, message)
