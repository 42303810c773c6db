"""
Models package for data structures and database entities.

This package contains Pydantic models for request validation, the order and
product domain entities, and their DynamoDB item representations.
"""

from .customer import Customer, CustomerSnapshot
from .dynamodb import (CustomerItem, DynamoDBItem, OrderItem, OrderLineItem,
                       ProductItem)
from .order import (NewOrder, Order, OrderFilter, OrderLine, OrderLineInput,
                    OrderStatus, UpdatedOrder)
from .pagination import OrderList, PaginationParams, ProductList
from .product import (CreateProductRequest, GetProductsRequest, Product,
                      ProductFilter, ProductMedia, ProductStatus,
                      UpdateProductRequest)

__all__ = [
    "Customer",
    "CustomerSnapshot",
    "DynamoDBItem",
    "OrderItem",
    "OrderLineItem",
    "CustomerItem",
    "ProductItem",
    "Order",
    "OrderLine",
    "OrderLineInput",
    "OrderStatus",
    "NewOrder",
    "UpdatedOrder",
    "OrderFilter",
    "PaginationParams",
    "OrderList",
    "ProductList",
    "Product",
    "ProductMedia",
    "ProductStatus",
    "ProductFilter",
    "CreateProductRequest",
    "UpdateProductRequest",
    "GetProductsRequest",
]
