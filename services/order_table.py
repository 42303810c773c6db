"""
DynamoDB operations for the order service table.

Orders, order lines and customers share one table. Multi-record writes
(an order together with its lines) are made in a single transaction so
readers never see an order without its lines.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import botocore
import pydantic

from models.customer import Customer
from models.keys import (ORDER_LINE_PARTITION, customer_key, order_key,
                         order_line_key, order_lines_prefix)
from models.order import Order, OrderFilter, OrderLine
from models.pagination import OrderList, PaginationParams
from services.dynamodb import (delete_action, ensure_success,
                               get_dynamodb_resource, put_action,
                               transact_write)
from services.metrics import MetricName, metrics
from services.query_router import build_order_list_query
from utils.config import get_config
from utils.errors import ResourceNotFoundError, ValidationError
from utils.pagination import offset_from_last_key

logger = logging.getLogger(__name__)


class OrderTable:
    """
    Encapsulates operations on the order service DynamoDB table.

    The boto3 Table is resolved on first use, so constructing the class
    needs neither AWS credentials nor a region.
    """

    def __init__(self, table_name: Optional[str] = None, dynamodb_resource=None):
        """
        :param table_name: Name of the DynamoDB table. Defaults to TABLE_NAME.
        :param dynamodb_resource: boto3 DynamoDB resource. Defaults to the shared one.
        """
        self._table_name = table_name
        self._dynamodb_resource = dynamodb_resource
        self._table = None

    @property
    def table_name(self) -> str:
        return self._table_name or get_config().table_name

    @property
    def table(self):
        if self._table is None:
            resource = self._dynamodb_resource or get_dynamodb_resource()
            self._table = resource.Table(self.table_name)
        return self._table

    # Customers

    def put_customer(self, customer: Customer) -> Customer:
        """
        Adds or replaces a customer.

        :param customer: The customer to store.
        :return: The stored customer.
        """
        try:
            response = self.table.put_item(Item=customer.to_dynamodb_item().to_item())
            ensure_success(response, "PutItem")
            return customer
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Couldn't put customer %s in table %s. Error: %s: %s",
                customer.id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

    def get_customer(self, customer_id: str) -> Customer:
        """
        Gets a customer by id.

        :param customer_id: The id of the customer.
        :return: The customer.
        :raises ResourceNotFoundError: If there is no such customer.
        """
        try:
            response = self.table.get_item(Key=customer_key(customer_id))
            ensure_success(response, "GetItem")
        except botocore.exceptions.ClientError as err:
            metrics.put_metric(MetricName.RETRIEVAL_ERROR)
            logger.error(
                "Couldn't get customer %s from table %s. Error: %s: %s",
                customer_id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        item = response.get("Item")
        if not item:
            raise ResourceNotFoundError(f"Customer {customer_id} not found")
        return _customer_from_item(item)

    # Orders

    def create_order(self, order: Order) -> Order:
        """
        Writes a new order and all of its lines in one transaction.

        :param order: The order to create.
        :return: The created order.
        """
        actions = [put_action(self.table_name, order.to_dynamodb_item().to_item())]
        actions.extend(
            put_action(self.table_name, line.to_item()) for line in order.line_items()
        )

        try:
            transact_write(self.table, actions, "CreateOrder")
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Couldn't create order %s with %d lines in table %s. Error: %s: %s",
                order.id,
                len(order.order_lines),
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        logger.info("Order created", extra={"order_id": order.id})
        return order

    def get_order(self, order_id: str) -> Order:
        """
        Gets an order together with its lines.

        :param order_id: The id of the order.
        :return: The order.
        :raises ResourceNotFoundError: If there is no such order.
        """
        try:
            response = self.table.get_item(Key=order_key(order_id))
            ensure_success(response, "GetItem")
        except botocore.exceptions.ClientError as err:
            metrics.put_metric(MetricName.RETRIEVAL_ERROR)
            logger.error(
                "Couldn't get order %s from table %s. Error: %s: %s",
                order_id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        item = response.get("Item")
        if not item:
            raise ResourceNotFoundError(f"Order {order_id} not found")

        lines = self.get_order_lines(order_id)
        return _order_from_item(item, lines)

    def get_order_lines(self, order_id: str) -> List[OrderLine]:
        """
        Gets every line of an order, following pagination to the end.

        :param order_id: The id of the order.
        :return: The order lines in sort key order.
        """
        query: Dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk AND begins_with(SK, :prefix)",
            "ExpressionAttributeValues": {
                ":pk": ORDER_LINE_PARTITION,
                ":prefix": order_lines_prefix(order_id),
            },
        }

        items: List[Dict[str, Any]] = []
        try:
            while True:
                response = ensure_success(self.table.query(**query), "Query")
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query["ExclusiveStartKey"] = last_key
        except botocore.exceptions.ClientError as err:
            metrics.put_metric(MetricName.RETRIEVAL_ERROR)
            logger.error(
                "Couldn't get lines of order %s from table %s. Error: %s: %s",
                order_id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        return [_order_line_from_item(item) for item in items]

    def update_order(self, order: Order, lines_to_delete: Iterable[str] = ()) -> Order:
        """
        Replaces an order and its lines in one transaction.

        Every line of ``order`` is put; each id in ``lines_to_delete`` is
        deleted.

        :param order: The order in its new state.
        :param lines_to_delete: Ids of existing lines that were dropped.
        :return: The updated order.
        """
        lines_to_delete = list(lines_to_delete)
        actions = [put_action(self.table_name, order.to_dynamodb_item().to_item())]
        actions.extend(
            put_action(self.table_name, line.to_item()) for line in order.line_items()
        )
        actions.extend(
            delete_action(self.table_name, order_line_key(order.id, line_id))
            for line_id in lines_to_delete
        )

        try:
            transact_write(self.table, actions, "UpdateOrder")
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Couldn't update order %s in table %s. Error: %s: %s",
                order.id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        logger.info(
            "Order updated",
            extra={"order_id": order.id, "deleted_lines": lines_to_delete},
        )
        return order

    def delete_order(self, order: Order) -> None:
        """
        Deletes an order and all of its lines in one transaction.

        :param order: The order to delete, with its lines loaded.
        """
        actions = [delete_action(self.table_name, order_key(order.id))]
        actions.extend(
            delete_action(self.table_name, order_line_key(order.id, line.id))
            for line in order.order_lines
        )

        try:
            transact_write(self.table, actions, "DeleteOrder")
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Couldn't delete order %s from table %s. Error: %s: %s",
                order.id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        logger.info("Order deleted", extra={"order_id": order.id})

    def list_orders(
        self, params: PaginationParams, filters: Optional[OrderFilter] = None
    ) -> OrderList:
        """
        Lists one page of orders.

        Lines are not loaded; listed orders have empty ``order_lines``.
        Records that fail validation are logged, counted and left out.

        :param params: Page size and the offset returned by the previous page.
        :param filters: Optional equality filters.
        :return: The page and the offset of the next page, if any.
        """
        filters = filters or OrderFilter()
        query = build_order_list_query(params, filters)

        try:
            response = ensure_success(self.table.query(**query), "Query")
        except botocore.exceptions.ClientError as err:
            metrics.put_metric(MetricName.RETRIEVAL_ERROR)
            logger.error(
                "Couldn't list orders from table %s with %s. Error: %s: %s",
                self.table_name,
                filters.model_dump(exclude_none=True),
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        orders = []
        for item in response.get("Items", []):
            try:
                orders.append(_order_from_item(item))
            except ValidationError:
                logger.warning(
                    "Skipping invalid order record", extra={"record_key": item.get("SK")}
                )

        return OrderList(
            items=orders, offset=offset_from_last_key(response.get("LastEvaluatedKey"))
        )


def _order_from_item(
    item: Dict[str, Any], lines: Optional[List[OrderLine]] = None
) -> Order:
    try:
        return Order.from_dynamodb_item(item, lines)
    except pydantic.ValidationError as e:
        metrics.put_metric(MetricName.INVALID_ORDER)
        logger.error("Order is invalid", extra={"record": item, "errors": e.errors()})
        raise ValidationError.from_pydantic(e, "Order is invalid")


def _order_line_from_item(item: Dict[str, Any]) -> OrderLine:
    try:
        return OrderLine.from_dynamodb_item(item)
    except pydantic.ValidationError as e:
        metrics.put_metric(MetricName.INVALID_ORDER)
        logger.error("Order line is invalid", extra={"record": item, "errors": e.errors()})
        raise ValidationError.from_pydantic(e, "Order line is invalid")


def _customer_from_item(item: Dict[str, Any]) -> Customer:
    try:
        return Customer.from_dynamodb_item(item)
    except pydantic.ValidationError as e:
        metrics.put_metric(MetricName.INVALID_CUSTOMER)
        logger.error("Customer is invalid", extra={"record": item, "errors": e.errors()})
        raise ValidationError.from_pydantic(e, "Customer is invalid")
