"""
Application error taxonomy.

Errors are raised where they are detected and travel unchanged to the
outermost Lambda decorator, which is the only place that turns them into
HTTP responses.
"""

from typing import Any, Dict, Optional

import pydantic


class ErrorCode:
    """Standard error codes for the application."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "RESOURCE_NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """
    Application error with an error code, message and HTTP status.

    Subclasses fix the error code and status so call sites only supply the
    message and optional details.
    """

    status_code = 500
    default_error_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"errorCode": self.error_code, "message": self.message, **self.details}


class ValidationError(AppError):
    """Malformed input or an entity that fails its schema."""

    status_code = 400
    default_error_code = ErrorCode.VALIDATION_ERROR

    @classmethod
    def from_pydantic(
        cls, error: pydantic.ValidationError, message: str = "Validation failed"
    ) -> "ValidationError":
        """Convert a pydantic validation error, keeping one line per failure."""
        problems = [
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in error.errors()
        ]
        return cls(
            f"{message}: {'; '.join(problems)}",
            details={"validationErrors": problems},
        )


class UnauthorizedError(AppError):
    status_code = 401
    default_error_code = ErrorCode.UNAUTHORIZED


class ResourceNotFoundError(AppError):
    status_code = 404
    default_error_code = ErrorCode.NOT_FOUND


class StorageError(AppError):
    """The storage layer answered with a non-success status."""

    status_code = 500
    default_error_code = ErrorCode.STORAGE_ERROR
