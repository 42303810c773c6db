"""
Order use cases.

Each function takes the authenticated principal (where the operation needs
one) and the order table explicitly, logs with its input as context and lets
errors propagate to the Lambda decorator.
"""

import logging
from typing import List

from models.base import utc_now
from models.order import NewOrder, Order, OrderFilter, OrderLine, UpdatedOrder
from models.pagination import OrderList, PaginationParams
from services.metrics import MetricName, metrics
from services.order_table import OrderTable
from utils.auth import Principal
from utils.logging import log_error

logger = logging.getLogger(__name__)


def create_order(table: OrderTable, new_order: NewOrder, principal: Principal) -> Order:
    """Create an order for an existing customer, created by ``principal``."""
    try:
        customer = table.get_customer(new_order.customer_id)
        order = Order.from_new_order(new_order, customer, principal)
        table.create_order(order)
    except Exception as e:
        log_error(
            logger,
            e,
            {"operation": "create_order", "input": new_order.model_dump(mode="json")},
        )
        raise

    metrics.put_metric(MetricName.ORDER_CREATED)
    return order


def get_order(table: OrderTable, order_id: str) -> Order:
    try:
        return table.get_order(order_id)
    except Exception as e:
        log_error(logger, e, {"operation": "get_order", "order_id": order_id})
        raise


def update_order(
    table: OrderTable, order_id: str, updated_order: UpdatedOrder, principal: Principal
) -> Order:
    """
    Replace an order and its lines.

    Lines whose id is not in the request are deleted. Lines that survive
    keep their original creation time; every line gets a new update time.
    The order keeps its creator and creation time, the customer snapshot is
    refreshed and the total is recomputed from the lines.
    """
    try:
        existing = table.get_order(order_id)
        customer = table.get_customer(updated_order.customer_id)

        now = utc_now()
        existing_lines = {line.id: line for line in existing.order_lines}
        incoming_ids = {line.id for line in updated_order.order_lines if line.id}
        lines_to_delete = [
            line_id for line_id in existing_lines if line_id not in incoming_ids
        ]

        lines: List[OrderLine] = []
        for line in updated_order.order_lines:
            previous = existing_lines.get(line.id) if line.id else None
            data = line.model_dump(exclude_none=True)
            data["order_id"] = existing.id
            data["updated_date_time"] = now
            if previous is not None:
                data["created_date_time"] = previous.created_date_time
            lines.append(OrderLine(**data))

        order = Order(
            id=existing.id,
            customer=customer.snapshot(),
            status=updated_order.status,
            branch_id=updated_order.branch_id,
            comments=updated_order.comments or "",
            created_by=existing.created_by,
            created_date_time=existing.created_date_time,
            updated_date_time=now,
            order_lines=lines,
        )
        table.update_order(order, lines_to_delete)
    except Exception as e:
        log_error(
            logger,
            e,
            {
                "operation": "update_order",
                "order_id": order_id,
                "input": updated_order.model_dump(mode="json"),
                "username": principal.username,
            },
        )
        raise

    metrics.put_metric(MetricName.ORDER_UPDATED)
    return order


def delete_order(table: OrderTable, order_id: str) -> None:
    """Delete an order with all of its lines."""
    try:
        order = table.get_order(order_id)
        table.delete_order(order)
    except Exception as e:
        log_error(logger, e, {"operation": "delete_order", "order_id": order_id})
        raise

    metrics.put_metric(MetricName.ORDER_DELETED)


def list_orders(
    table: OrderTable, params: PaginationParams, filters: OrderFilter
) -> OrderList:
    try:
        return table.list_orders(params, filters)
    except Exception as e:
        log_error(
            logger,
            e,
            {
                "operation": "list_orders",
                "pagination": params.model_dump(),
                "filters": filters.model_dump(mode="json", exclude_none=True),
            },
        )
        raise
