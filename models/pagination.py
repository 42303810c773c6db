"""Pagination parameters and paged result models."""

from typing import List, Optional

from pydantic import Field

from models.base import CamelModel
from models.order import Order
from models.product import Product


class PaginationParams(CamelModel):
    """Page size and order cursor for the order list endpoint."""

    limit: int = Field(..., gt=0)
    offset: Optional[str] = None


class OrderList(CamelModel):
    """One page of orders. ``offset`` is absent on the last page."""

    items: List[Order]
    offset: Optional[str] = None


class ProductList(CamelModel):
    """One page of products. ``next_token`` is absent on the last page."""

    products: List[Product]
    next_token: Optional[str] = None
