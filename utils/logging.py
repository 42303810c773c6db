"""
Centralized logging configuration for the order and product services.

Every Lambda function logs one JSON document per line so CloudWatch Logs
Insights can filter on the service tags and on any ``extra`` fields.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import get_config

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Formats records as JSON with the service tags attached."""

    def __init__(self, service_tags: Optional[Dict[str, str]] = None):
        super().__init__()
        self.service_tags = service_tags or {}

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            **self.service_tags,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRIBUTES:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logger(
    name: str, level: Optional[str] = None, structured: bool = True
) -> logging.Logger:
    """
    Set up a logger with consistent configuration.

    Args:
        name: Logger name (typically __name__)
        level: Log level, defaults to the LOG_LEVEL setting
        structured: Whether to use structured JSON logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers on warm starts
    if logger.handlers:
        return logger

    config = get_config()
    logger.setLevel(getattr(logging, (level or config.log_level).upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if structured:
        handler.setFormatter(
            StructuredFormatter(
                {"service": config.service_name, "environment": config.environment}
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def log_lambda_event(
    logger: logging.Logger, event: Dict[str, Any], context: Any
) -> None:
    """Log the request line of an API Gateway event."""
    request_context = event.get("requestContext") or {}
    logger.info(
        "Lambda invocation started",
        extra={
            "request_id": getattr(context, "aws_request_id", "unknown"),
            "function_name": getattr(context, "function_name", "unknown"),
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_parameters": event.get("pathParameters"),
            "query_parameters": event.get("queryStringParameters"),
            "api_request_id": request_context.get("requestId"),
        },
    )


def log_lambda_response(
    logger: logging.Logger,
    response: Dict[str, Any],
    execution_time_ms: Optional[float] = None,
) -> None:
    logger.info(
        "Lambda invocation completed",
        extra={
            "status_code": response.get("statusCode"),
            "execution_time_ms": execution_time_ms,
            "response_size": len(str(response.get("body", ""))),
        },
    )


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log errors with additional context.

    Args:
        logger: Logger instance
        error: Exception that occurred
        context: Additional context information, e.g. the operation input
    """
    extra = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        extra.update(context)

    logger.error(f"Error occurred: {error}", extra=extra, exc_info=True)
