"""
Shared DynamoDB resources for the order and product services.

This module provides the DynamoDB resource reused across warm invocations and
the helpers for transactional writes and storage response checks used by the
table classes.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import boto3

from utils.config import get_config
from utils.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

# DynamoDB TransactWriteItems accepts at most 100 actions
MAX_TRANSACTION_ITEMS = 100

_dynamodb_resource = None


def get_dynamodb_resource():
    """
    Return the process-wide DynamoDB resource, creating it on first use.

    ``DYNAMODB_ENDPOINT`` points the resource at a local DynamoDB when set.
    """
    global _dynamodb_resource
    if _dynamodb_resource is None:
        endpoint_url = get_config().dynamodb_endpoint
        if endpoint_url:
            _dynamodb_resource = boto3.resource("dynamodb", endpoint_url=endpoint_url)
        else:
            _dynamodb_resource = boto3.resource("dynamodb")
    return _dynamodb_resource


def reset_dynamodb_resource() -> None:
    global _dynamodb_resource
    _dynamodb_resource = None


def ensure_success(response: Mapping[str, Any], operation: str) -> Mapping[str, Any]:
    """
    Check the HTTP status of a storage response.

    :param response: The boto3 response.
    :param operation: Name of the operation, used in the error message.
    :return: The response when its status is 200.
    :raises StorageError: For any other status.
    """
    status_code = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    if status_code != 200:
        logger.error(
            "DynamoDB %s returned unexpected status %s", operation, status_code
        )
        raise StorageError(
            f"Unexpected response from {operation}",
            details={"operation": operation, "statusCode": status_code},
        )
    return response


def put_action(table_name: str, item: Dict[str, Any]) -> Dict[str, Any]:
    return {"Put": {"TableName": table_name, "Item": item}}


def delete_action(table_name: str, key: Dict[str, Any]) -> Dict[str, Any]:
    return {"Delete": {"TableName": table_name, "Key": key}}


def transact_write(
    table, actions: List[Dict[str, Any]], operation: Optional[str] = None
) -> Mapping[str, Any]:
    """
    Write ``actions`` atomically.

    The resource-level client serialises plain Python values, so actions
    carry items exactly as they are put with ``Table.put_item``.

    :param table: The boto3 Table the actions belong to.
    :param actions: Put/Delete actions built with put_action/delete_action.
    :param operation: Name of the calling operation for logs and errors.
    :raises ValidationError: When there are more actions than one transaction allows.
    """
    operation = operation or "TransactWriteItems"
    if len(actions) > MAX_TRANSACTION_ITEMS:
        raise ValidationError(
            f"Too many items in one transaction: {len(actions)}",
            details={"maximum": MAX_TRANSACTION_ITEMS, "operation": operation},
        )

    response = table.meta.client.transact_write_items(TransactItems=actions)
    return ensure_success(response, operation)
