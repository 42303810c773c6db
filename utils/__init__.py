"""
Utils package for shared utilities and cross-cutting concerns.

This package contains configuration, errors, logging, pagination, response
formatting and request validation used across the order and product
services. Lambda decorators live in ``utils.decorators`` and are imported
from there by the handlers.
"""

from .auth import Principal, principal_from_event
from .config import get_config
from .errors import (AppError, ResourceNotFoundError, StorageError,
                     UnauthorizedError, ValidationError)
from .logging import (log_error, log_lambda_event, log_lambda_response,
                      setup_logger)
from .responses import (HTTPStatus, error_response, no_content_response,
                        success_response)

__all__ = [
    # Auth
    "Principal",
    "principal_from_event",
    # Config
    "get_config",
    # Errors
    "AppError",
    "ValidationError",
    "UnauthorizedError",
    "ResourceNotFoundError",
    "StorageError",
    # Logging
    "setup_logger",
    "log_lambda_event",
    "log_lambda_response",
    "log_error",
    # Responses
    "HTTPStatus",
    "success_response",
    "no_content_response",
    "error_response",
]
