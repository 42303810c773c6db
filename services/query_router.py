"""
Query selection for the list endpoints.

At most one filter is served by a global secondary index. The first filter
present, in index precedence order, picks the index; every other filter is
applied as a storage-side ``FilterExpression``. Attribute names always go
through ``ExpressionAttributeNames`` placeholders so reserved words such as
``status`` and ``name`` are safe.

The functions return keyword arguments for ``Table.query`` / ``Table.scan``
and never touch the table themselves.
"""

from typing import Any, Dict, List, Optional, Tuple

from models.keys import (ORDER_INDEXES, ORDER_PARTITION, PRODUCT_INDEXES,
                         PRODUCT_KEY_PREFIX, IndexKey, index_key_value)
from models.order import OrderFilter
from models.pagination import PaginationParams
from models.product import GetProductsRequest, ProductFilter
from utils.pagination import decode_next_token

# Order filter field -> (index, persisted attribute used as residual filter)
ORDER_FILTERS: Tuple[Tuple[str, IndexKey, str], ...] = (
    ("customer_id", ORDER_INDEXES[0], "customerId"),
    ("account_manager", ORDER_INDEXES[1], "customerAccountManager"),
    ("customer_email", ORDER_INDEXES[2], "customerEmail"),
    ("branch_id", ORDER_INDEXES[3], "branchId"),
    ("created_by", ORDER_INDEXES[4], "createdBy"),
)

# Product filter field -> index, in precedence order
PRODUCT_INDEX_FILTERS: Tuple[Tuple[str, IndexKey], ...] = (
    ("product_type", PRODUCT_INDEXES[0]),
    ("product_category", PRODUCT_INDEXES[1]),
    ("status", PRODUCT_INDEXES[2]),
)


class _ExpressionBuilder:
    """Collects condition clauses with unique name and value placeholders."""

    def __init__(self):
        self.names: Dict[str, str] = {}
        self.values: Dict[str, Any] = {}
        self.key_conditions: List[str] = []
        self.filters: List[str] = []

    def name(self, attribute_path: str) -> str:
        placeholders = []
        for part in attribute_path.split("."):
            placeholder = f"#{part}"
            self.names[placeholder] = part
            placeholders.append(placeholder)
        return ".".join(placeholders)

    def value(self, key: str, value: Any) -> str:
        placeholder = f":{key}"
        self.values[placeholder] = value
        return placeholder

    def key_condition(self, clause: str) -> None:
        self.key_conditions.append(clause)

    def filter(self, clause: str) -> None:
        self.filters.append(clause)

    def build(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.key_conditions:
            params["KeyConditionExpression"] = " AND ".join(self.key_conditions)
        if self.filters:
            params["FilterExpression"] = " AND ".join(self.filters)
        if self.names:
            params["ExpressionAttributeNames"] = self.names
        if self.values:
            params["ExpressionAttributeValues"] = self.values
        return params


def build_order_list_query(
    params: PaginationParams, filters: Optional[OrderFilter] = None
) -> Dict[str, Any]:
    """
    Build the ``Table.query`` arguments for one page of orders.

    Index precedence: customerId (GSI1), accountManager (GSI2), customerEmail
    (GSI3), branchId (GSI4), createdBy (GSI5). Without any of these the
    ``ORDER`` partition of the base table is queried. ``status`` is always a
    residual filter.

    The offset is the order id of the last item of the previous page. For an
    index query the exclusive start key also needs the index key pair, which
    is rebuilt from the equality filter that selected the index.
    """
    filters = filters or OrderFilter()
    expression = _ExpressionBuilder()
    index: Optional[IndexKey] = None
    index_value: Optional[str] = None

    for field, candidate, attribute in ORDER_FILTERS:
        value = getattr(filters, field)
        if value is None:
            continue
        if index is None:
            index = candidate
            index_value = index_key_value(value)
            expression.key_condition(
                f"{expression.name(candidate.partition_attribute)} = "
                f"{expression.value('index_pk', candidate.partition_value)}"
            )
            expression.key_condition(
                f"{expression.name(candidate.sort_attribute)} = "
                f"{expression.value('index_sk', index_value)}"
            )
        else:
            expression.filter(
                f"{expression.name(attribute)} = {expression.value(field, value)}"
            )

    if index is None:
        expression.key_condition(
            f"{expression.name('PK')} = {expression.value('pk', ORDER_PARTITION)}"
        )

    if filters.status is not None:
        expression.filter(
            f"{expression.name('status')} = "
            f"{expression.value('status', filters.status.value)}"
        )

    query = expression.build()
    query["Limit"] = params.limit
    if index is not None:
        query["IndexName"] = index.index_name

    if params.offset:
        start_key = {"PK": ORDER_PARTITION, "SK": params.offset}
        if index is not None:
            start_key[index.partition_attribute] = index.partition_value
            start_key[index.sort_attribute] = index_value
        query["ExclusiveStartKey"] = start_key

    return query


def build_product_list_query(request: GetProductsRequest) -> Tuple[str, Dict[str, Any]]:
    """
    Build the arguments for one page of products.

    Index precedence: productType (GSI1), productCategory (GSI2), status
    (GSI3), each matched on the ``{value}#`` sort key prefix. Without any of
    these the table is scanned for ``PRODUCT#`` keys. brand, manufacturer and
    the price range are residual filters.

    :return: ``("query" | "scan", kwargs)``
    :raises ValidationError: If the next token is malformed.
    """
    product_filter = request.filter or ProductFilter()
    expression = _ExpressionBuilder()
    index: Optional[IndexKey] = None

    for field, candidate in PRODUCT_INDEX_FILTERS:
        value = getattr(product_filter, field)
        if value is None:
            continue
        index = candidate
        expression.key_condition(
            f"{expression.name(candidate.partition_attribute)} = "
            f"{expression.value('index_pk', candidate.partition_value)}"
        )
        expression.key_condition(
            f"begins_with({expression.name(candidate.sort_attribute)}, "
            f"{expression.value('index_sk', f'{index_key_value(value)}#')})"
        )
        break

    if index is None:
        expression.filter(
            f"begins_with({expression.name('PK')}, "
            f"{expression.value('pk_prefix', PRODUCT_KEY_PREFIX)})"
        )

    if product_filter.brand:
        expression.filter(
            f"{expression.name('brand')} = {expression.value('brand', product_filter.brand)}"
        )
    if product_filter.manufacturer:
        expression.filter(
            f"{expression.name('manufacturer')} = "
            f"{expression.value('manufacturer', product_filter.manufacturer)}"
        )

    price_range = product_filter.price_range
    if price_range is not None and price_range.min is not None:
        expression.filter(
            f"{expression.name('price.amount')} >= "
            f"{expression.value('min_price', price_range.min)}"
        )
    if price_range is not None and price_range.max is not None:
        expression.filter(
            f"{expression.name('price.amount')} <= "
            f"{expression.value('max_price', price_range.max)}"
        )

    kwargs = expression.build()
    kwargs["Limit"] = request.limit
    if index is not None:
        kwargs["IndexName"] = index.index_name
    if request.next_token:
        kwargs["ExclusiveStartKey"] = decode_next_token(request.next_token)

    return ("query" if index is not None else "scan"), kwargs
