"""
Order handlers for the order service API.

This module provides the CRUD endpoints for orders:
- POST /orders
- GET /orders/{id}
- PUT /orders/{id}
- DELETE /orders/{id}
- GET /orders

Every endpoint requires the Cognito claims forwarded by API Gateway. The
caller's username is recorded as the creator of new orders.
"""

from models.order import NewOrder, OrderFilter, UpdatedOrder
from services import orders
from services.order_table import OrderTable
from utils.decorators import (extract_path_params, lambda_handler,
                              require_auth, validate_json_body)
from utils.pagination import parse_and_validate_query_parameters
from utils.responses import HTTPStatus, no_content_response, success_response
from utils.validation import parse_model

order_table = OrderTable()


@lambda_handler()
@require_auth
@validate_json_body()
def create_order(event, context):
    """
    Create an order for an existing customer.

    POST /orders

    The customer snapshot is read from the customer record and the caller
    becomes ``createdBy``.

    Returns:
        201 with the created order
    """
    new_order = parse_model(NewOrder, event["json_body"], "Invalid order")
    order = orders.create_order(order_table, new_order, event["principal"])
    return success_response(order, HTTPStatus.CREATED)


@lambda_handler()
@require_auth
@extract_path_params("id")
def get_order(event, context):
    """
    Get an order with its lines.

    GET /orders/{id}
    """
    order = orders.get_order(order_table, event["path_params"]["id"])
    return success_response(order)


@lambda_handler()
@require_auth
@extract_path_params("id")
@validate_json_body()
def update_order(event, context):
    """
    Replace an order and its lines.

    PUT /orders/{id}

    Returns:
        201 with the updated order
    """
    updated_order = parse_model(UpdatedOrder, event["json_body"], "Invalid order")
    order = orders.update_order(
        order_table, event["path_params"]["id"], updated_order, event["principal"]
    )
    return success_response(order, HTTPStatus.CREATED)


@lambda_handler()
@require_auth
@extract_path_params("id")
def delete_order(event, context):
    """
    Delete an order and its lines.

    DELETE /orders/{id}

    Returns:
        204 with an empty body
    """
    orders.delete_order(order_table, event["path_params"]["id"])
    return no_content_response()


@lambda_handler()
@require_auth
def list_orders(event, context):
    """
    List orders one page at a time.

    GET /orders?limit=&offset=&customerId=&accountManager=&customerEmail=&branchId=&createdBy=&status=

    Returns:
        200 with ``{"items": [...], "offset": "..."}``; ``offset`` is absent
        on the last page
    """
    query_params = event.get("queryStringParameters") or {}
    params = parse_and_validate_query_parameters(query_params)
    filters = parse_model(
        OrderFilter,
        {key: value for key, value in query_params.items() if value},
        "Invalid order filter",
    )
    return success_response(orders.list_orders(order_table, params, filters))
