"""DynamoDB operations for the product service table."""

import logging
from typing import Any, Dict, List, Optional

import botocore
import pydantic

from models.base import utc_now
from models.keys import format_timestamp, product_key
from models.pagination import ProductList
from models.product import (CreateProductRequest, GetProductsRequest, Product,
                            ProductMedia, UpdateProductRequest,
                            index_sort_keys)
from services.dynamodb import ensure_success, get_dynamodb_resource
from services.metrics import MetricName, metrics
from services.query_router import build_product_list_query
from utils.config import get_config
from utils.errors import ResourceNotFoundError, ValidationError
from utils.pagination import encode_next_token

logger = logging.getLogger(__name__)


class ProductTable:
    """
    Encapsulates operations on the product DynamoDB table.

    Each product is one item keyed ``PRODUCT#{id}`` on both PK and SK.
    """

    def __init__(self, table_name: Optional[str] = None, dynamodb_resource=None):
        """
        :param table_name: Name of the DynamoDB table. Defaults to PRODUCT_TABLE_NAME.
        :param dynamodb_resource: boto3 DynamoDB resource. Defaults to the shared one.
        """
        self._table_name = table_name
        self._dynamodb_resource = dynamodb_resource
        self._table = None

    @property
    def table_name(self) -> str:
        return self._table_name or get_config().product_table_name

    @property
    def table(self):
        if self._table is None:
            resource = self._dynamodb_resource or get_dynamodb_resource()
            self._table = resource.Table(self.table_name)
        return self._table

    def create_product(self, request: CreateProductRequest) -> Product:
        """
        Creates a product from a create request.

        :param request: The validated create request.
        :return: The stored product with its generated id and media ids.
        """
        product = Product.from_create_request(request)
        try:
            response = self.table.put_item(Item=product.to_dynamodb_item().to_item())
            ensure_success(response, "PutItem")
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Couldn't put product %s in table %s. Error: %s: %s",
                product.name,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        logger.info("Product created", extra={"product_id": product.id})
        return product

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """
        Gets a product by id.

        :param product_id: The id of the product.
        :return: The product if found, None otherwise.
        """
        try:
            response = self.table.get_item(Key=product_key(product_id))
            ensure_success(response, "GetItem")
        except botocore.exceptions.ClientError as err:
            metrics.put_metric(MetricName.RETRIEVAL_ERROR)
            logger.error(
                "Couldn't get product %s from table %s. Error: %s: %s",
                product_id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        item = response.get("Item")
        if not item:
            return None
        return _product_from_item(item)

    def update_product(self, product_id: str, request: UpdateProductRequest) -> Product:
        """
        Applies a partial update.

        Only the supplied fields, ``updatedAt`` and the index sort keys are
        written. The sort keys are recomputed from the product's original
        creation time.

        :param product_id: The id of the product.
        :param request: The fields to change.
        :return: The product as stored after the update.
        :raises ResourceNotFoundError: If there is no such product.
        """
        current = self.get_product_by_id(product_id)
        if current is None:
            raise ResourceNotFoundError(f"Product {product_id} not found")

        changes = _update_values(request)
        sort_keys = index_sort_keys(
            changes.get("productType", current.product_type),
            changes.get("productCategory", current.product_category),
            changes.get("status", current.status),
            current.created_at,
        )
        changes["updatedAt"] = format_timestamp(utc_now())
        changes["GSI1SK"] = sort_keys["product_type"]
        changes["GSI2SK"] = sort_keys["product_category"]
        changes["GSI3SK"] = sort_keys["status"]

        names = {}
        values = {}
        assignments = []
        for position, (attribute, value) in enumerate(changes.items()):
            names[f"#f{position}"] = attribute
            values[f":v{position}"] = value
            assignments.append(f"#f{position} = :v{position}")

        try:
            response = self.table.update_item(
                Key=product_key(product_id),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
            ensure_success(response, "UpdateItem")
        except botocore.exceptions.ClientError as err:
            if err.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ResourceNotFoundError(f"Product {product_id} not found")
            logger.error(
                "Couldn't update product %s in table %s. Error: %s: %s",
                product_id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        logger.info(
            "Product updated",
            extra={"product_id": product_id, "fields": sorted(changes)},
        )
        return _product_from_item(response["Attributes"])

    def delete_product(self, product_id: str) -> bool:
        """
        Deletes a product.

        :param product_id: The id of the product.
        :return: True if a product was deleted, False if there was none.
        """
        try:
            response = self.table.delete_item(
                Key=product_key(product_id), ReturnValues="ALL_OLD"
            )
            ensure_success(response, "DeleteItem")
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Couldn't delete product %s from table %s. Error: %s: %s",
                product_id,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        return bool(response.get("Attributes"))

    def get_products(self, request: GetProductsRequest) -> ProductList:
        """
        Lists one page of products.

        Records that fail validation are logged, counted and left out.

        :param request: Page size, next token and filters.
        :return: The page and the token of the next page, if any.
        """
        operation, kwargs = build_product_list_query(request)
        try:
            if operation == "query":
                response = self.table.query(**kwargs)
            else:
                response = self.table.scan(**kwargs)
            ensure_success(response, operation.capitalize())
        except botocore.exceptions.ClientError as err:
            metrics.put_metric(MetricName.RETRIEVAL_ERROR)
            logger.error(
                "Couldn't list products from table %s with %s. Error: %s: %s",
                self.table_name,
                kwargs.get("FilterExpression") or kwargs.get("KeyConditionExpression"),
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise

        products: List[Product] = []
        for item in response.get("Items", []):
            try:
                products.append(_product_from_item(item))
            except ValidationError:
                logger.warning(
                    "Skipping invalid product record", extra={"record_key": item.get("PK")}
                )

        return ProductList(
            products=products,
            next_token=encode_next_token(response.get("LastEvaluatedKey")),
        )


def _update_values(request: UpdateProductRequest) -> Dict[str, Any]:
    """Persisted attribute values for the fields supplied in the request."""
    changes = request.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    changes.pop("media", None)
    if request.media is not None:
        changes["media"] = [
            ProductMedia.from_input(item).model_dump(by_alias=True, exclude_none=True)
            for item in request.media
        ]
    if "status" in changes:
        changes["status"] = request.status.value
    return changes


def _product_from_item(item: Dict[str, Any]) -> Product:
    try:
        return Product.from_dynamodb_item(item)
    except pydantic.ValidationError as e:
        metrics.put_metric(MetricName.INVALID_PRODUCT)
        logger.error("Product is invalid", extra={"record": item, "errors": e.errors()})
        raise ValidationError.from_pydantic(e, "Product is invalid")
