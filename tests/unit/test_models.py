"""Unit tests for the domain models and their DynamoDB mapping."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List

import pydantic
import pytest

from models.customer import Customer, CustomerSnapshot
from models.order import NewOrder, Order, OrderLine, OrderStatus, UpdatedOrder
from models.product import (CreateProductRequest, GetProductsRequest, Product,
                            ProductStatus, UpdateProductRequest)
from utils.auth import Principal


@pytest.fixture
def snapshot(sample_customer: Customer) -> CustomerSnapshot:
    return sample_customer.snapshot()


class TestOrder:
    """Tests for Order construction."""

    def test_total_amount_defaults_to_sum_of_lines(
        self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]
    ) -> None:
        """Test lines of 10 and 15 without a total give 25."""
        order = Order(customer=snapshot, branch_id="b1", order_lines=sample_order_lines)

        assert order.total_amount == Decimal("25")

    def test_explicit_total_amount_is_kept(
        self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]
    ) -> None:
        """Test a supplied total is not recomputed."""
        order = Order(
            customer=snapshot,
            branch_id="b1",
            total_amount=Decimal("99"),
            order_lines=sample_order_lines,
        )

        assert order.total_amount == Decimal("99")

    def test_empty_order_total_is_zero(self, snapshot: CustomerSnapshot) -> None:
        """Test an order without lines totals zero."""
        assert Order(customer=snapshot, branch_id="b1").total_amount == Decimal("0")

    def test_defaults(self, snapshot: CustomerSnapshot) -> None:
        """Test id, status, comments and timestamps are defaulted."""
        order = Order(customer=snapshot, branch_id="b1")

        assert order.id
        assert order.status == OrderStatus.PENDING
        assert order.comments == ""
        assert order.created_date_time.tzinfo is not None

    def test_lines_carry_parent_id(
        self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]
    ) -> None:
        """Test every line is bound to its order, whatever it was given."""
        lines = [dict(line, orderId="other") for line in sample_order_lines]
        order = Order(id="order-1", customer=snapshot, branch_id="b1", order_lines=lines)

        assert [line.order_id for line in order.order_lines] == ["order-1", "order-1"]

    def test_generated_id_is_bound_to_lines(
        self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]
    ) -> None:
        """Test lines get the generated order id."""
        order = Order(customer=snapshot, branch_id="b1", order_lines=sample_order_lines)

        assert all(line.order_id == order.id for line in order.order_lines)

    def test_id_is_not_regenerated(self, snapshot: CustomerSnapshot) -> None:
        """Test a supplied id is kept."""
        assert Order(id="fixed", customer=snapshot, branch_id="b1").id == "fixed"

    def test_invalid_status_rejected(self, snapshot: CustomerSnapshot) -> None:
        """Test unknown statuses fail validation."""
        with pytest.raises(pydantic.ValidationError):
            Order(customer=snapshot, branch_id="b1", status="LOST")

    def test_empty_index_values_rejected(
        self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]
    ) -> None:
        """Test empty branch, creator and product ids fail validation."""
        empty_product = [dict(sample_order_lines[0], productId="")]

        with pytest.raises(pydantic.ValidationError):
            Order(customer=snapshot, branch_id="")
        with pytest.raises(pydantic.ValidationError):
            Order(customer=snapshot, branch_id="b1", created_by="")
        with pytest.raises(pydantic.ValidationError):
            Order(customer=snapshot, branch_id="b1", order_lines=empty_product)
        with pytest.raises(pydantic.ValidationError):
            NewOrder.model_validate(
                {"customerId": "c1", "branchId": "b1", "orderLines": empty_product}
            )

    def test_from_new_order(self, sample_customer: Customer, sample_order_lines: List[Any]) -> None:
        """Test a new order takes the customer snapshot and the principal."""
        new_order = NewOrder.model_validate(
            {"customerId": "customer-1", "branchId": "b1", "orderLines": sample_order_lines}
        )

        order = Order.from_new_order(new_order, sample_customer, Principal(username="alice"))

        assert order.created_by == "alice"
        assert order.customer.email == "orders@acme.example"
        assert order.total_amount == Decimal("25")
        assert order.status == OrderStatus.PENDING

    def test_api_shape_is_camel_case(self, snapshot: CustomerSnapshot) -> None:
        """Test the wire representation uses camelCase names."""
        dumped = Order(customer=snapshot, branch_id="b1").model_dump(by_alias=True)

        assert "branchId" in dumped
        assert "totalAmount" in dumped
        assert dumped["customer"]["accountManager"] == "jane.doe"


class TestOrderMapping:
    """Tests for order to/from DynamoDB item conversion."""

    def test_order_item_keys(
        self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]
    ) -> None:
        """Test the order item carries keys and the flattened customer."""
        order = Order(
            id="order-1",
            customer=snapshot,
            branch_id="b1",
            created_by="alice",
            order_lines=sample_order_lines,
        )

        item = order.to_dynamodb_item().to_item()

        assert item["PK"] == "ORDER"
        assert item["SK"] == "order-1"
        assert item["customerId"] == "customer-1"
        assert item["customerAccountManager"] == "jane.doe"
        assert item["GSI4_PK"] == "BRANCH"
        assert item["GSI4_SK"] == "b1"
        assert item["GSI5_SK"] == "alice"
        assert "orderLines" not in item

    def test_order_without_creator_omits_gsi5(self, snapshot: CustomerSnapshot) -> None:
        """Test absent attributes are omitted rather than stored as NULL."""
        item = Order(customer=snapshot, branch_id="b1").to_dynamodb_item().to_item()

        assert "createdBy" not in item
        assert "GSI5_PK" not in item
        assert None not in item.values()

    def test_line_item_keys(self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]) -> None:
        """Test line items are keyed under their order."""
        order = Order(id="order-1", customer=snapshot, branch_id="b1", order_lines=sample_order_lines)

        items = [item.to_item() for item in order.line_items()]

        assert all(item["PK"] == "ORDER_LINE" for item in items)
        assert all(item["SK"].startswith("ORDER_ID#order-1#LINE_ID#") for item in items)
        assert items[1]["GSI2_SK"] == "3"
        assert items[1]["price"] == Decimal("5")

    def test_round_trip(self, snapshot: CustomerSnapshot, sample_order_lines: List[Any]) -> None:
        """Test an order survives conversion to an item and back."""
        order = Order(customer=snapshot, branch_id="b1", created_by="alice", order_lines=sample_order_lines)

        item = order.to_dynamodb_item().to_item()
        lines = [OrderLine.from_dynamodb_item(line.to_item()) for line in order.line_items()]

        assert Order.from_dynamodb_item(item, lines) == order

    def test_malformed_record_rejected(self) -> None:
        """Test a stored record missing required fields fails validation."""
        with pytest.raises(pydantic.ValidationError):
            Order.from_dynamodb_item({"PK": "ORDER", "SK": "x", "id": "x"})

    def test_record_without_id_rejected(self, snapshot: CustomerSnapshot) -> None:
        """Test a stored record without an id is not given a fresh one."""
        item = Order(customer=snapshot, branch_id="b1").to_dynamodb_item().to_item()
        del item["id"]

        with pytest.raises(pydantic.ValidationError):
            Order.from_dynamodb_item(item)


class TestCustomer:
    """Tests for Customer mapping."""

    def test_item(self, sample_customer: Customer) -> None:
        """Test customer keys and indexes."""
        item = sample_customer.to_dynamodb_item().to_item()

        assert item["PK"] == "CUSTOMER"
        assert item["SK"] == "customer-1"
        assert item["GSI1_SK"] == "Acme Ltd"
        assert item["GSI3_PK"] == "ACCOUNT_MANAGER"

    def test_round_trip(self, sample_customer: Customer) -> None:
        """Test a customer survives conversion to an item and back."""
        item = sample_customer.to_dynamodb_item().to_item()

        assert Customer.from_dynamodb_item(item) == sample_customer

    def test_naive_timestamps_are_utc(self) -> None:
        """Test naive datetimes are treated as UTC."""
        customer = Customer(
            name="n",
            email="e",
            account_manager="m",
            created_date_time=datetime(2024, 1, 1),
        )

        assert customer.created_date_time.tzinfo == timezone.utc

    @pytest.mark.parametrize("field", ["name", "email", "account_manager"])
    def test_indexed_fields_must_not_be_empty(self, field: str) -> None:
        """Test values used as index sort keys reject empty strings."""
        values = {"name": "n", "email": "e", "account_manager": "m", field: ""}

        with pytest.raises(pydantic.ValidationError):
            Customer(**values)
        with pytest.raises(pydantic.ValidationError):
            CustomerSnapshot(id="c1", **values)


class TestProduct:
    """Tests for Product construction and mapping."""

    def test_from_create_request(self) -> None:
        """Test defaults and media ids on creation."""
        request = CreateProductRequest.model_validate(
            {
                "name": "Laptop",
                "productType": "Electronics",
                "price": {"amount": "999.99", "currency": "GBP"},
                "media": [{"type": "image", "url": "https://cdn.example/l.png"}],
            }
        )

        product = Product.from_create_request(request)

        assert product.status == ProductStatus.ACTIVE
        assert product.media[0].id
        assert product.created_at == product.updated_at

    def test_item_layout(self) -> None:
        """Test keys, nested price and index sort keys."""
        product = Product(
            id="p1",
            name="Laptop",
            product_category="Computers",
            price={"amount": Decimal("10.50"), "currency": "GBP"},
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        item = product.to_dynamodb_item().to_item()

        assert item["PK"] == item["SK"] == "PRODUCT#p1"
        assert item["price"] == {"amount": Decimal("10.50"), "currency": "GBP"}
        assert item["GSI1SK"] == "UNKNOWN#2024-01-01T00:00:00+00:00"
        assert item["GSI2SK"] == "Computers#2024-01-01T00:00:00+00:00"
        assert item["GSI3SK"] == "ACTIVE#2024-01-01T00:00:00+00:00"
        assert "description" not in item

    def test_round_trip(self) -> None:
        """Test a product survives conversion to an item and back."""
        product = Product(
            name="Chair",
            dimensions={"height": Decimal("1.2"), "unitOfMeasure": "m"},
            media=[{"id": "m1", "type": "image", "url": "https://x.example/a.png", "isPrimary": True}],
            custom_attributes={"colour": "red"},
        )

        item = product.to_dynamodb_item().to_item()

        assert item["dimensions"]["unitOfMeasure"] == "m"
        assert Product.from_dynamodb_item(item) == product

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": ""},
            {"name": "x" * 256},
            {"name": "x", "price": {"amount": 0, "currency": "GBP"}},
            {"name": "x", "price": {"amount": 1, "currency": "POUND"}},
            {"name": "x", "media": [{"type": "image", "url": "not-a-url"}]},
            {"name": "x", "status": "ARCHIVED"},
        ],
    )
    def test_invalid_create_requests(self, payload: dict) -> None:
        """Test create request constraints."""
        with pytest.raises(pydantic.ValidationError):
            CreateProductRequest.model_validate(payload)

    def test_empty_update_rejected(self) -> None:
        """Test an update must change at least one field."""
        with pytest.raises(pydantic.ValidationError):
            UpdateProductRequest.model_validate({})

    def test_partial_update_accepted(self) -> None:
        """Test a single field is a valid update."""
        request = UpdateProductRequest.model_validate({"brand": "Acme"})

        assert request.model_fields_set == {"brand"}


class TestGetProductsRequest:
    """Tests for folding list query strings into a request."""

    def test_defaults(self) -> None:
        """Test no parameters gives the default page size."""
        request = GetProductsRequest.from_query_parameters(None)

        assert request.limit == 20
        assert request.filter is None

    def test_filters(self) -> None:
        """Test flat parameters become the nested filter."""
        request = GetProductsRequest.from_query_parameters(
            {"limit": "5", "productType": "Electronics", "minPrice": "10", "maxPrice": "20"}
        )

        assert request.limit == 5
        assert request.filter.product_type == "Electronics"
        assert request.filter.price_range.min == Decimal("10")
        assert request.filter.price_range.max == Decimal("20")

    @pytest.mark.parametrize(
        "params",
        [
            {"limit": "0"},
            {"limit": "101"},
            {"limit": "abc"},
            {"minPrice": "20", "maxPrice": "10"},
            {"status": "ARCHIVED"},
        ],
    )
    def test_invalid(self, params: dict) -> None:
        """Test invalid list parameters."""
        with pytest.raises(pydantic.ValidationError):
            GetProductsRequest.from_query_parameters(params)


class TestUpdatedOrder:
    """Tests for order update requests."""

    def test_status_required(self) -> None:
        """Test an update must state the status."""
        with pytest.raises(pydantic.ValidationError):
            UpdatedOrder.model_validate({"customerId": "c", "branchId": "b"})
