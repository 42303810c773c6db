"""DynamoDB data models for the order and product tables."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from models.base import CamelModel


class DynamoDBItem(CamelModel):
    """Base class for all DynamoDB items."""

    PK: str
    SK: str

    def to_item(self) -> Dict[str, Any]:
        """Attribute map as written to the table. Absent attributes are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class OrderItem(DynamoDBItem):
    """Represents an order item in DynamoDB."""

    PK: str  # ORDER
    SK: str  # order id
    id: str
    customer_id: str
    customer_name: str
    customer_email: str
    customer_account_manager: str
    created_date_time: str
    updated_date_time: str
    created_by: Optional[str] = None
    status: str
    total_amount: Decimal
    branch_id: str
    comments: str = ""
    GSI1_PK: str  # CUSTOMER_ID
    GSI1_SK: str
    GSI2_PK: str  # CUSTOMER_ACCOUNT_MANAGER
    GSI2_SK: str
    GSI3_PK: str  # CUSTOMER_EMAIL
    GSI3_SK: str
    GSI4_PK: str  # BRANCH
    GSI4_SK: str
    GSI5_PK: Optional[str] = None  # CREATED_BY
    GSI5_SK: Optional[str] = None


class OrderLineItem(DynamoDBItem):
    """Represents an order line item in DynamoDB."""

    PK: str  # ORDER_LINE
    SK: str  # ORDER_ID#{order_id}#LINE_ID#{line_id}
    id: str
    order_id: str
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal
    created_date_time: str
    updated_date_time: str
    GSI1_PK: str  # PRODUCT_ID
    GSI1_SK: str
    GSI2_PK: str  # QUANTITY
    GSI2_SK: str
    GSI3_PK: str  # PRICE
    GSI3_SK: str


class CustomerItem(DynamoDBItem):
    """Represents a customer item in DynamoDB."""

    PK: str  # CUSTOMER
    SK: str  # customer id
    id: str
    name: str
    email: str
    account_manager: str
    created_date_time: str
    updated_date_time: str
    GSI1_PK: str  # CUSTOMER_NAME
    GSI1_SK: str
    GSI2_PK: str  # CUSTOMER_EMAIL
    GSI2_SK: str
    GSI3_PK: str  # ACCOUNT_MANAGER
    GSI3_SK: str


class ProductItem(DynamoDBItem):
    """Represents a product item in DynamoDB. Nested values stay maps."""

    PK: str  # PRODUCT#{id}
    SK: str  # PRODUCT#{id}
    id: str
    name: str
    description: Optional[str] = None
    product_number: Optional[str] = None
    product_type: Optional[str] = None
    product_category: Optional[str] = None
    brand: Optional[str] = None
    manufacturer: Optional[str] = None
    sku: Optional[str] = None
    gtin: Optional[str] = None
    price: Optional[Dict[str, Any]] = None
    dimensions: Optional[Dict[str, Any]] = None
    status: str
    created_at: str
    updated_at: str
    media: Optional[List[Dict[str, Any]]] = None
    related_products: Optional[List[str]] = None
    custom_attributes: Optional[Dict[str, Any]] = None
    GSI1PK: str  # PRODUCT
    GSI1SK: str  # {productType or UNKNOWN}#{createdAt}
    GSI2PK: str  # PRODUCT
    GSI2SK: str  # {productCategory or UNKNOWN}#{createdAt}
    GSI3PK: str  # PRODUCT
    GSI3SK: str  # {status}#{createdAt}
