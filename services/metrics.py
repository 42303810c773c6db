"""
CloudWatch metrics for the order and product services.

Counters are buffered for the duration of one invocation and published in
batches by the Lambda decorator when the invocation ends. Each counter is
recorded twice: once without dimensions for dashboards, once with the
service/domain/country/environment dimensions taken from the configuration.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3

from utils.config import get_config

logger = logging.getLogger(__name__)

# CloudWatch PutMetricData accepts at most 20 metric datums per request
MAX_METRICS_PER_REQUEST = 20


class MetricName:
    """Counters emitted by the services."""

    ORDER_CREATED = "OrderCreated"
    ORDER_UPDATED = "OrderUpdated"
    ORDER_DELETED = "OrderDeleted"
    PRODUCT_CREATED = "ProductCreated"
    PRODUCT_UPDATED = "ProductUpdated"
    PRODUCT_DELETED = "ProductDeleted"
    INVALID_ORDER = "InvalidOrder"
    INVALID_CUSTOMER = "InvalidCustomer"
    INVALID_PRODUCT = "InvalidProduct"
    RETRIEVAL_ERROR = "RetrievalError"


class MetricsClient:
    """
    Buffers counters and publishes them to CloudWatch.

    Usage:
        metrics.put_metric(MetricName.ORDER_CREATED)
        metrics.publish()
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        dimensions: Optional[Dict[str, str]] = None,
        cloudwatch_client: Any = None,
    ):
        self._namespace = namespace
        self._dimensions = dimensions
        self._cloudwatch = cloudwatch_client
        self._metric_data: List[Dict[str, Any]] = []

    @property
    def namespace(self) -> str:
        return self._namespace or get_config().metrics_namespace

    @property
    def dimensions(self) -> Dict[str, str]:
        if self._dimensions is None:
            return get_config().metric_dimensions
        return self._dimensions

    @property
    def cloudwatch(self):
        # Created on first publish so importing this module needs no AWS region
        if self._cloudwatch is None:
            self._cloudwatch = boto3.client("cloudwatch")
        return self._cloudwatch

    @property
    def pending(self) -> List[Dict[str, Any]]:
        """Metric datums recorded since the last publish."""
        return list(self._metric_data)

    def put_metric(
        self,
        metric_name: str,
        count: int = 1,
        dimensions: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Record a counter.

        Args:
            metric_name: Name of the metric, see MetricName
            count: Value to add (default: 1)
            dimensions: Extra dimensions merged over the service dimensions
        """
        timestamp = datetime.now(timezone.utc)
        self._metric_data.append(
            {
                "MetricName": metric_name,
                "Value": float(count),
                "Unit": "Count",
                "Timestamp": timestamp,
            }
        )

        all_dimensions = {**self.dimensions, **(dimensions or {})}
        if all_dimensions:
            self._metric_data.append(
                {
                    "MetricName": metric_name,
                    "Value": float(count),
                    "Unit": "Count",
                    "Timestamp": timestamp,
                    "Dimensions": [
                        {"Name": name, "Value": str(value)}
                        for name, value in all_dimensions.items()
                    ],
                }
            )

    def publish(self) -> None:
        """
        Publish all buffered metrics to CloudWatch.

        A failed publish is logged and the buffer is dropped; metrics never
        fail the request that produced them.
        """
        if not self._metric_data:
            return

        batch_data, self._metric_data = self._metric_data, []
        try:
            for i in range(0, len(batch_data), MAX_METRICS_PER_REQUEST):
                self.cloudwatch.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=batch_data[i : i + MAX_METRICS_PER_REQUEST],
                )
        except Exception as e:
            logger.warning(
                "Failed to publish metrics",
                extra={"error_message": str(e), "metric_count": len(batch_data)},
            )

    def clear(self) -> None:
        self._metric_data = []


# Process-wide client reused across warm invocations
metrics = MetricsClient()
