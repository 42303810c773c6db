"""Order model objects for the order service."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from models.base import CamelModel, as_utc, utc_now
from models.customer import Customer, CustomerSnapshot
from models.dynamodb import OrderItem, OrderLineItem
from models.keys import (ORDER_INDEXES, ORDER_LINE_INDEXES, format_timestamp,
                         index_attributes, order_key, order_line_key)
from utils.auth import Principal


class OrderStatus(str, Enum):
    """Lifecycle states of an order."""

    PENDING = "PENDING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


def _new_id() -> str:
    return str(uuid.uuid4())


class OrderLine(CamelModel):
    """One product line of an order. Always carries its parent order id."""

    id: str = Field(default_factory=_new_id, min_length=1)
    order_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal
    created_date_time: datetime = Field(default_factory=utc_now)
    updated_date_time: datetime = Field(default_factory=utc_now)

    @field_validator("created_date_time", "updated_date_time")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def to_dynamodb_item(self) -> OrderLineItem:
        """Convert to DynamoDB item format."""
        return OrderLineItem(
            **order_line_key(self.order_id, self.id),
            id=self.id,
            order_id=self.order_id,
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            price=self.price,
            total=self.total,
            created_date_time=format_timestamp(self.created_date_time),
            updated_date_time=format_timestamp(self.updated_date_time),
            **index_attributes(
                ORDER_LINE_INDEXES,
                {
                    "product_id": self.product_id,
                    "quantity": self.quantity,
                    "price": self.price,
                },
            ),
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "OrderLine":
        """Create an OrderLine from a DynamoDB item. Raises pydantic.ValidationError."""
        return cls(
            id=item.get("id"),
            order_id=item.get("orderId"),
            product_id=item.get("productId"),
            product_name=item.get("productName"),
            quantity=item.get("quantity"),
            price=item.get("price"),
            total=item.get("total"),
            created_date_time=item.get("createdDateTime"),
            updated_date_time=item.get("updatedDateTime"),
        )


class Order(CamelModel):
    """
    An order with its lines and a snapshot of the customer.

    ``id`` is generated when absent, every line is bound to ``id`` and
    ``total_amount`` defaults to the sum of the line totals.
    """

    id: str = Field(default_factory=_new_id, min_length=1)
    customer: CustomerSnapshot
    status: OrderStatus = OrderStatus.PENDING
    total_amount: Optional[Decimal] = None
    branch_id: str = Field(..., min_length=1)
    comments: str = ""
    created_by: Optional[str] = Field(None, min_length=1)
    created_date_time: datetime = Field(default_factory=utc_now)
    updated_date_time: datetime = Field(default_factory=utc_now)
    order_lines: List[OrderLine] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _bind_lines_to_order(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        if data.get("id") is None:
            data["id"] = _new_id()
        order_id = data["id"]

        lines_key = "orderLines" if "orderLines" in data else "order_lines"
        lines = data.get(lines_key)
        if lines:
            data[lines_key] = [_with_order_id(line, order_id) for line in lines]
        return data

    @model_validator(mode="after")
    def _default_total_amount(self) -> "Order":
        if self.total_amount is None:
            self.total_amount = sum(
                (line.total for line in self.order_lines), Decimal("0")
            )
        return self

    @field_validator("created_date_time", "updated_date_time")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @classmethod
    def from_new_order(
        cls, new_order: "NewOrder", customer: Customer, principal: Principal
    ) -> "Order":
        """Build a new order for ``customer`` created by ``principal``."""
        return cls(
            customer=customer.snapshot(),
            status=new_order.status or OrderStatus.PENDING,
            total_amount=new_order.total_amount,
            branch_id=new_order.branch_id,
            comments=new_order.comments or "",
            created_by=principal.username,
            order_lines=[
                line.model_dump(exclude_none=True) for line in new_order.order_lines
            ],
        )

    def to_dynamodb_item(self) -> OrderItem:
        """Convert the order record (without its lines) to DynamoDB item format."""
        return OrderItem(
            **order_key(self.id),
            id=self.id,
            customer_id=self.customer.id,
            customer_name=self.customer.name,
            customer_email=self.customer.email,
            customer_account_manager=self.customer.account_manager,
            created_date_time=format_timestamp(self.created_date_time),
            updated_date_time=format_timestamp(self.updated_date_time),
            created_by=self.created_by,
            status=self.status.value,
            total_amount=self.total_amount,
            branch_id=self.branch_id,
            comments=self.comments,
            **index_attributes(
                ORDER_INDEXES,
                {
                    "customer_id": self.customer.id,
                    "customer_account_manager": self.customer.account_manager,
                    "customer_email": self.customer.email,
                    "branch_id": self.branch_id,
                    "created_by": self.created_by,
                },
            ),
        )

    def line_items(self) -> List[OrderLineItem]:
        return [line.to_dynamodb_item() for line in self.order_lines]

    @classmethod
    def from_dynamodb_item(
        cls, item: Dict[str, Any], lines: Optional[List[OrderLine]] = None
    ) -> "Order":
        """
        Create an Order from a DynamoDB item and the order's lines.

        Raises:
            pydantic.ValidationError: If the stored record is malformed
        """
        return cls(
            id=item.get("id", ""),
            customer={
                "id": item.get("customerId"),
                "name": item.get("customerName"),
                "email": item.get("customerEmail"),
                "account_manager": item.get("customerAccountManager"),
            },
            status=item.get("status"),
            total_amount=item.get("totalAmount"),
            branch_id=item.get("branchId"),
            comments=item.get("comments", ""),
            created_by=item.get("createdBy"),
            created_date_time=item.get("createdDateTime"),
            updated_date_time=item.get("updatedDateTime"),
            order_lines=lines or [],
        )


def _with_order_id(line: Any, order_id: str) -> Any:
    if isinstance(line, OrderLine):
        return line.model_copy(update={"order_id": order_id})
    if isinstance(line, dict):
        line = {k: v for k, v in line.items() if k not in ("orderId", "order_id")}
        line["order_id"] = order_id
    return line


class OrderLineInput(CamelModel):
    """Order line as sent by API clients. ``id`` identifies an existing line."""

    id: Optional[str] = None
    product_id: str = Field(..., min_length=1)
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal


class NewOrder(CamelModel):
    """Model for creating new orders - excludes auto-generated fields."""

    customer_id: str = Field(..., min_length=1)
    status: Optional[OrderStatus] = None
    total_amount: Optional[Decimal] = None
    branch_id: str = Field(..., min_length=1)
    comments: Optional[str] = None
    order_lines: List[OrderLineInput] = Field(default_factory=list)


class UpdatedOrder(CamelModel):
    """Model for replacing an order and its lines."""

    customer_id: str = Field(..., min_length=1)
    status: OrderStatus
    branch_id: str = Field(..., min_length=1)
    comments: Optional[str] = None
    order_lines: List[OrderLineInput] = Field(default_factory=list)


class OrderFilter(CamelModel):
    """Equality filters accepted by the order list endpoint."""

    customer_id: Optional[str] = None
    account_manager: Optional[str] = None
    customer_email: Optional[str] = None
    branch_id: Optional[str] = None
    created_by: Optional[str] = Field(None, min_length=1)
    status: Optional[OrderStatus] = None
