"""Product use cases."""

import logging

from models.pagination import ProductList
from models.product import (CreateProductRequest, GetProductsRequest, Product,
                            UpdateProductRequest)
from services.metrics import MetricName, metrics
from services.product_table import ProductTable
from utils.errors import ResourceNotFoundError
from utils.logging import log_error

logger = logging.getLogger(__name__)


def create_product(table: ProductTable, request: CreateProductRequest) -> Product:
    try:
        product = table.create_product(request)
    except Exception as e:
        log_error(
            logger,
            e,
            {"operation": "create_product", "input": request.model_dump(mode="json")},
        )
        raise

    metrics.put_metric(MetricName.PRODUCT_CREATED)
    return product


def get_product(table: ProductTable, product_id: str) -> Product:
    """Get a product; raises ResourceNotFoundError when there is none."""
    try:
        product = table.get_product_by_id(product_id)
    except Exception as e:
        log_error(logger, e, {"operation": "get_product", "product_id": product_id})
        raise

    if product is None:
        raise ResourceNotFoundError(f"Product {product_id} not found")
    return product


def update_product(
    table: ProductTable, product_id: str, request: UpdateProductRequest
) -> Product:
    try:
        product = table.update_product(product_id, request)
    except Exception as e:
        log_error(
            logger,
            e,
            {
                "operation": "update_product",
                "product_id": product_id,
                "input": request.model_dump(mode="json", exclude_unset=True),
            },
        )
        raise

    metrics.put_metric(MetricName.PRODUCT_UPDATED)
    return product


def delete_product(table: ProductTable, product_id: str) -> None:
    """Delete a product; raises ResourceNotFoundError when there is none."""
    get_product(table, product_id)
    if not table.delete_product(product_id):
        raise ResourceNotFoundError(f"Product {product_id} not found")

    metrics.put_metric(MetricName.PRODUCT_DELETED)


def get_products(table: ProductTable, request: GetProductsRequest) -> ProductList:
    try:
        return table.get_products(request)
    except Exception as e:
        log_error(
            logger,
            e,
            {
                "operation": "get_products",
                "input": request.model_dump(mode="json", exclude_none=True),
            },
        )
        raise
