"""
Handlers package for Lambda function handlers.

This package contains the API endpoint handlers for the order service and
the product service.
"""

from . import orders, products

__all__ = ["orders", "products"]
