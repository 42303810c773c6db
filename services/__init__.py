"""
Services package for business logic and DynamoDB access.

This package contains the order and product table classes, the query router
used by the list operations, the use cases called by the handlers and the
CloudWatch metrics client.
"""

from .metrics import MetricName, MetricsClient, metrics
from .order_table import OrderTable
from .product_table import ProductTable

__all__ = [
    "MetricName",
    "MetricsClient",
    "metrics",
    "OrderTable",
    "ProductTable",
]
