"""Customer model objects for the order service."""

import uuid
from datetime import datetime
from typing import Any, Dict

from pydantic import Field, field_validator

from models.base import CamelModel, as_utc, utc_now
from models.dynamodb import CustomerItem
from models.keys import CUSTOMER_INDEXES, customer_key, format_timestamp, index_attributes


class CustomerSnapshot(CamelModel):
    """Customer details copied into an order when it is created or updated."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    account_manager: str = Field(..., min_length=1)


class Customer(CamelModel):
    """A customer an order is placed for."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1)
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    account_manager: str = Field(..., min_length=1)
    created_date_time: datetime = Field(default_factory=utc_now)
    updated_date_time: datetime = Field(default_factory=utc_now)

    @field_validator("created_date_time", "updated_date_time")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def snapshot(self) -> CustomerSnapshot:
        return CustomerSnapshot(
            id=self.id,
            name=self.name,
            email=self.email,
            account_manager=self.account_manager,
        )

    def to_dynamodb_item(self) -> CustomerItem:
        """Convert to DynamoDB item format."""
        return CustomerItem(
            **customer_key(self.id),
            id=self.id,
            name=self.name,
            email=self.email,
            account_manager=self.account_manager,
            created_date_time=format_timestamp(self.created_date_time),
            updated_date_time=format_timestamp(self.updated_date_time),
            **index_attributes(
                CUSTOMER_INDEXES,
                {
                    "name": self.name,
                    "email": self.email,
                    "account_manager": self.account_manager,
                },
            ),
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "Customer":
        """Create a Customer from a DynamoDB item. Raises pydantic.ValidationError."""
        return cls(
            id=item.get("id"),
            name=item.get("name"),
            email=item.get("email"),
            account_manager=item.get("accountManager"),
            created_date_time=item.get("createdDateTime"),
            updated_date_time=item.get("updatedDateTime"),
        )
