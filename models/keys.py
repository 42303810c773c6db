"""
Key construction for the single-table designs.

Order service access patterns
-----------------------------
* Order by id                     -> PK="ORDER", SK=id
* Orders by customer id           -> GSI1
* Orders by account manager       -> GSI2
* Orders by customer email        -> GSI3
* Orders by branch                -> GSI4
* Orders by creator               -> GSI5
* Lines of an order               -> PK="ORDER_LINE", begins_with(SK, "ORDER_ID#{id}#LINE_ID#")
* Lines by product id / quantity / price -> GSI1 / GSI2 / GSI3
* Customer by id                  -> PK="CUSTOMER", SK=id
* Customers by name / email / account manager -> GSI1 / GSI2 / GSI3

Product service access patterns
-------------------------------
* Product by id                   -> PK=SK="PRODUCT#{id}"
* Products by type / category / status, in creation order -> GSI1 / GSI2 / GSI3

Every entity type lives under one constant partition value, so all orders
(or all products) share one partition. Listing and point reads stay simple;
write throughput per entity type is bounded by a single partition.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

ORDER_PARTITION = "ORDER"
ORDER_LINE_PARTITION = "ORDER_LINE"
CUSTOMER_PARTITION = "CUSTOMER"
PRODUCT_PARTITION = "PRODUCT"
PRODUCT_KEY_PREFIX = f"{PRODUCT_PARTITION}#"

# Sort key segment used when an indexed product field is absent
UNKNOWN_INDEX_VALUE = "UNKNOWN"


@dataclass(frozen=True)
class IndexKey:
    """One global secondary index: a constant partition tag and a sort field."""

    index_name: str
    partition_attribute: str
    sort_attribute: str
    partition_value: str
    field: str


def _order_style_index(number: int, partition_value: str, field: str) -> IndexKey:
    return IndexKey(
        index_name=f"GSI{number}",
        partition_attribute=f"GSI{number}_PK",
        sort_attribute=f"GSI{number}_SK",
        partition_value=partition_value,
        field=field,
    )


def _product_style_index(number: int, field: str) -> IndexKey:
    return IndexKey(
        index_name=f"GSI{number}",
        partition_attribute=f"GSI{number}PK",
        sort_attribute=f"GSI{number}SK",
        partition_value=PRODUCT_PARTITION,
        field=field,
    )


# Order of the tuples is the query precedence used by the query router.
ORDER_INDEXES: Tuple[IndexKey, ...] = (
    _order_style_index(1, "CUSTOMER_ID", "customer_id"),
    _order_style_index(2, "CUSTOMER_ACCOUNT_MANAGER", "customer_account_manager"),
    _order_style_index(3, "CUSTOMER_EMAIL", "customer_email"),
    _order_style_index(4, "BRANCH", "branch_id"),
    _order_style_index(5, "CREATED_BY", "created_by"),
)

ORDER_LINE_INDEXES: Tuple[IndexKey, ...] = (
    _order_style_index(1, "PRODUCT_ID", "product_id"),
    _order_style_index(2, "QUANTITY", "quantity"),
    _order_style_index(3, "PRICE", "price"),
)

CUSTOMER_INDEXES: Tuple[IndexKey, ...] = (
    _order_style_index(1, "CUSTOMER_NAME", "name"),
    _order_style_index(2, "CUSTOMER_EMAIL", "email"),
    _order_style_index(3, "ACCOUNT_MANAGER", "account_manager"),
)

PRODUCT_INDEXES: Tuple[IndexKey, ...] = (
    _product_style_index(1, "product_type"),
    _product_style_index(2, "product_category"),
    _product_style_index(3, "status"),
)


def order_key(order_id: str) -> Dict[str, str]:
    return {"PK": ORDER_PARTITION, "SK": order_id}


def order_lines_prefix(order_id: str) -> str:
    """Sort key prefix shared by every line of one order."""
    return f"ORDER_ID#{order_id}#LINE_ID#"


def order_line_key(order_id: str, line_id: str) -> Dict[str, str]:
    return {"PK": ORDER_LINE_PARTITION, "SK": f"{order_lines_prefix(order_id)}{line_id}"}


def customer_key(customer_id: str) -> Dict[str, str]:
    return {"PK": CUSTOMER_PARTITION, "SK": customer_id}


def product_key(product_id: str) -> Dict[str, str]:
    key = f"{PRODUCT_KEY_PREFIX}{product_id}"
    return {"PK": key, "SK": key}


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def product_index_sort_key(value: Optional[Any], created_at: datetime) -> str:
    """
    Product GSI sort key: ``{value}#{createdAt}``.

    The creation time keeps products sharing a value in creation order. It is
    always the original creation time, also when the product is updated.
    """
    if value is None or value == "":
        value = UNKNOWN_INDEX_VALUE
    if hasattr(value, "value"):
        value = value.value
    return f"{value}#{format_timestamp(created_at)}"


def index_key_value(value: Any) -> str:
    """
    String form of a field used as a GSI sort key.

    Decimals are written as plain numbers without trailing zeros, so 10,
    10.0 and 10.00 share one key.
    """
    if hasattr(value, "value"):
        value = value.value
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return f"{value}"


def index_attributes(
    indexes: Iterable[IndexKey], values: Mapping[str, Any]
) -> Dict[str, str]:
    """
    Build the GSI attributes for one record.

    Args:
        indexes: Index descriptors of the record's entity type
        values: Field values keyed by ``IndexKey.field``; for products the
            values are already full sort keys

    Returns:
        ``{partition_attribute: tag, sort_attribute: value}`` for every index
        whose value is present. A missing value leaves the record out of
        that index.
    """
    attributes: Dict[str, str] = {}
    for index in indexes:
        value = values.get(index.field)
        if value is None:
            continue
        attributes[index.partition_attribute] = index.partition_value
        attributes[index.sort_attribute] = index_key_value(value)
    return attributes
