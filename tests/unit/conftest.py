"""
Test fixtures for Lambda function tests.

Provides mocked AWS resources shaped like the production tables, sample
records and API Gateway events.
"""

import json
import os
from decimal import Decimal
from typing import Any, Callable, Dict, Generator, Optional
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from models.customer import Customer
from services.dynamodb import reset_dynamodb_resource
from services.metrics import metrics
from services.order_table import OrderTable
from services.product_table import ProductTable
from utils.config import clear_config_cache

ORDER_TABLE_NAME = "OrderTable"
PRODUCT_TABLE_NAME = "ProductTable"


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch: Any) -> Generator[None, None, None]:
    """Fresh configuration, DynamoDB resource and metrics buffer per test."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("TABLE_NAME", ORDER_TABLE_NAME)
    monkeypatch.setenv("PRODUCT_TABLE_NAME", PRODUCT_TABLE_NAME)
    clear_config_cache()
    reset_dynamodb_resource()
    metrics.clear()
    monkeypatch.setattr(metrics, "_cloudwatch", MagicMock())
    yield
    metrics.clear()
    reset_dynamodb_resource()
    clear_config_cache()


@pytest.fixture
def aws_credentials() -> None:
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


def _index(name: str, partition_attribute: str, sort_attribute: str) -> Dict[str, Any]:
    return {
        "IndexName": name,
        "KeySchema": [
            {"AttributeName": partition_attribute, "KeyType": "HASH"},
            {"AttributeName": sort_attribute, "KeyType": "RANGE"},
        ],
        "Projection": {"ProjectionType": "ALL"},
    }


def create_order_table(dynamodb: Any) -> Any:
    """Order service table: PK/SK with GSI1..GSI5 on GSIn_PK/GSIn_SK."""
    attributes = ["PK", "SK"]
    indexes = []
    for number in range(1, 6):
        attributes.extend([f"GSI{number}_PK", f"GSI{number}_SK"])
        indexes.append(_index(f"GSI{number}", f"GSI{number}_PK", f"GSI{number}_SK"))

    return dynamodb.create_table(
        TableName=ORDER_TABLE_NAME,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": name, "AttributeType": "S"} for name in attributes
        ],
        GlobalSecondaryIndexes=indexes,
        BillingMode="PAY_PER_REQUEST",
    )


def create_product_table(dynamodb: Any) -> Any:
    """Product table: PK/SK with GSI1..GSI3 on GSInPK/GSInSK."""
    attributes = ["PK", "SK"]
    indexes = []
    for number in range(1, 4):
        attributes.extend([f"GSI{number}PK", f"GSI{number}SK"])
        indexes.append(_index(f"GSI{number}", f"GSI{number}PK", f"GSI{number}SK"))

    return dynamodb.create_table(
        TableName=PRODUCT_TABLE_NAME,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": name, "AttributeType": "S"} for name in attributes
        ],
        GlobalSecondaryIndexes=indexes,
        BillingMode="PAY_PER_REQUEST",
    )


@pytest.fixture
def order_dynamodb_table(aws_credentials: None) -> Generator[Any, None, None]:
    """Create the mock order service table."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        yield create_order_table(dynamodb)


@pytest.fixture
def product_dynamodb_table(aws_credentials: None) -> Generator[Any, None, None]:
    """Create the mock product table."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        yield create_product_table(dynamodb)


@pytest.fixture
def orders_repository(order_dynamodb_table: Any) -> OrderTable:
    return OrderTable()


@pytest.fixture
def products_repository(product_dynamodb_table: Any) -> ProductTable:
    return ProductTable()


@pytest.fixture
def sample_customer() -> Customer:
    return Customer(
        id="customer-1",
        name="Acme Ltd",
        email="orders@acme.example",
        account_manager="jane.doe",
    )


@pytest.fixture
def stored_customer(orders_repository: OrderTable, sample_customer: Customer) -> Customer:
    """Sample customer written to the mock table."""
    return orders_repository.put_customer(sample_customer)


@pytest.fixture
def sample_order_lines() -> list:
    return [
        {
            "productId": "product-1",
            "productName": "Widget",
            "quantity": 1,
            "price": Decimal("10"),
            "total": Decimal("10"),
        },
        {
            "productId": "product-2",
            "productName": "Gadget",
            "quantity": 3,
            "price": Decimal("5"),
            "total": Decimal("15"),
        },
    ]


@pytest.fixture
def lambda_context() -> Any:
    """Mock Lambda context."""

    class Context:
        function_name = "test-function"
        memory_limit_in_mb = 128
        invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-function"
        aws_request_id = "test-request-id"

    return Context()


@pytest.fixture
def api_event() -> Callable[..., Dict[str, Any]]:
    """Factory for API Gateway proxy events with Cognito claims."""

    def make_event(
        method: str = "GET",
        path: str = "/",
        body: Any = None,
        path_parameters: Optional[Dict[str, str]] = None,
        query_parameters: Optional[Dict[str, str]] = None,
        username: Optional[str] = "test-user",
        groups: Any = "admin",
    ) -> Dict[str, Any]:
        request_context: Dict[str, Any] = {"requestId": "api-request-id"}
        if username is not None:
            request_context["authorizer"] = {
                "claims": {"cognito:username": username, "cognito:groups": groups}
            }

        if body is not None and not isinstance(body, str):
            body = json.dumps(body)

        return {
            "httpMethod": method,
            "path": path,
            "body": body,
            "pathParameters": path_parameters,
            "queryStringParameters": query_parameters,
            "requestContext": request_context,
        }

    return make_event
