"""
Decorators for Lambda function handlers.

This module provides decorators that add consistent logging, authentication,
request parsing and error-to-HTTP translation to the API handlers. Handlers
raise application errors; ``lambda_handler`` is the only place that turns
them into responses.
"""

import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

import pydantic

from services.metrics import metrics

from .auth import principal_from_event
from .errors import AppError, UnauthorizedError, ValidationError
from .logging import (log_error, log_lambda_event, log_lambda_response,
                      setup_logger)
from .responses import HTTPStatus, error_response
from .validation import parse_json_body, validate_id


def lambda_handler(
    logger_name: Optional[str] = None,
    log_event: bool = True,
    log_response: bool = True,
    structured_logging: bool = True,
) -> Callable:
    """
    Decorator for Lambda function handlers that provides:
    - Consistent logging setup
    - Automatic event/response logging
    - Translation of errors into HTTP responses
    - Publishing of the metrics recorded during the invocation

    Args:
        logger_name: Logger name (defaults to function module name)
        log_event: Whether to log incoming events
        log_response: Whether to log responses
        structured_logging: Whether to use structured JSON logging

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            logger = setup_logger(
                logger_name or func.__module__, structured=structured_logging
            )

            start_time = time.time()
            error_context = {
                "function_name": getattr(context, "function_name", "unknown"),
                "request_id": getattr(context, "aws_request_id", "unknown"),
                "event_path": event.get("path"),
                "event_method": event.get("httpMethod"),
            }

            try:
                if log_event:
                    log_lambda_event(logger, event, context)

                response = func(event, context)

                if not isinstance(response, dict) or "statusCode" not in response:
                    logger.warning("Handler returned invalid response format")
                    response = error_response(
                        "Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR
                    )

            except pydantic.ValidationError as e:
                response = _app_error_response(
                    logger, ValidationError.from_pydantic(e), error_context
                )
            except AppError as e:
                response = _app_error_response(logger, e, error_context)
            except Exception as e:
                log_error(logger, e, error_context)
                response = error_response(
                    "Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR, e
                )
            finally:
                metrics.publish()

            if log_response:
                execution_time = (time.time() - start_time) * 1000
                log_lambda_response(logger, response, execution_time)

            return response

        return wrapper

    return decorator


def _app_error_response(logger, error: AppError, error_context: Dict[str, Any]):
    if error.status_code >= 500:
        log_error(logger, error, error_context)
    else:
        logger.warning(
            error.message,
            extra={"error_code": error.error_code, "details": error.details, **error_context},
        )
    return error_response(error.message, error.status_code, error)


def require_auth(func: Callable) -> Callable:
    """
    Decorator that ensures the request is authenticated.

    The principal built from the Cognito claims forwarded by API Gateway is
    stored under ``event["principal"]`` for the handler to pass on.

    Args:
        func: Function to decorate

    Returns:
        Decorated function
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        principal = principal_from_event(event)
        if principal is None:
            raise UnauthorizedError("Unauthorized access")

        event["principal"] = principal
        return func(event, context)

    return wrapper


def validate_json_body() -> Callable:
    """
    Decorator that parses the JSON request body into ``event["json_body"]``.

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            event["json_body"] = parse_json_body(event)
            return func(event, context)

        return wrapper

    return decorator


def extract_path_params(*param_names: str) -> Callable:
    """
    Decorator that extracts and validates id path parameters.

    Args:
        param_names: Names of path parameters to extract

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            path_params = event.get("pathParameters") or {}
            event["path_params"] = {
                param: validate_id(path_params.get(param)) for param in param_names
            }
            return func(event, context)

        return wrapper

    return decorator
