"""Product model objects for the product service."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator

from models.base import CamelModel, as_utc, utc_now
from models.dynamodb import ProductItem
from models.keys import (PRODUCT_INDEXES, format_timestamp, index_attributes,
                         product_index_sort_key, product_key)


class ProductStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DISCONTINUED = "DISCONTINUED"


class Price(CamelModel):
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)


class Dimensions(CamelModel):
    height: Optional[Decimal] = Field(None, gt=0)
    width: Optional[Decimal] = Field(None, gt=0)
    depth: Optional[Decimal] = Field(None, gt=0)
    weight: Optional[Decimal] = Field(None, gt=0)
    unit_of_measure: Optional[str] = None


class ProductMediaInput(CamelModel):
    """Media attached to a product, as sent by API clients."""

    type: str = Field(..., min_length=1)  # image, video, document, ...
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    is_primary: Optional[bool] = None

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("url must be an absolute URI")
        return value


class ProductMedia(ProductMediaInput):
    id: str = Field(..., min_length=1)

    @classmethod
    def from_input(cls, media: ProductMediaInput) -> "ProductMedia":
        """Assign a fresh id to client supplied media."""
        return cls(id=str(uuid.uuid4()), **media.model_dump())


class ProductFields(CamelModel):
    """Descriptive fields shared by products and product write requests."""

    description: Optional[str] = Field(None, max_length=2000)
    product_number: Optional[str] = Field(None, max_length=100)
    product_type: Optional[str] = Field(None, max_length=100)
    product_category: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    sku: Optional[str] = Field(None, max_length=100)
    gtin: Optional[str] = Field(None, max_length=100)
    price: Optional[Price] = None
    dimensions: Optional[Dimensions] = None
    related_products: Optional[List[str]] = None
    custom_attributes: Optional[Dict[str, Any]] = None


class Product(ProductFields):
    """
    A product based on the Common Data Model product entity.

    Products are keyed ``PRODUCT#{id}`` and indexed by type, category and
    status, each in creation order.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    status: ProductStatus = ProductStatus.ACTIVE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    media: Optional[List[ProductMedia]] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @classmethod
    def from_create_request(cls, request: "CreateProductRequest") -> "Product":
        """Build a new product; media get fresh ids."""
        now = utc_now()
        data = request.model_dump(exclude_none=True, exclude={"media"})
        media = None
        if request.media is not None:
            media = [ProductMedia.from_input(item) for item in request.media]
        return cls(**data, media=media, created_at=now, updated_at=now)

    def index_sort_keys(self) -> Dict[str, str]:
        """GSI sort keys, always derived from the original creation time."""
        return index_sort_keys(
            self.product_type, self.product_category, self.status, self.created_at
        )

    def to_dynamodb_item(self) -> ProductItem:
        """Convert to DynamoDB item format."""
        data = self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"id", "created_at", "updated_at", "status"},
        )
        return ProductItem(
            **product_key(self.id),
            **data,
            id=self.id,
            status=self.status.value,
            created_at=format_timestamp(self.created_at),
            updated_at=format_timestamp(self.updated_at),
            **index_attributes(PRODUCT_INDEXES, self.index_sort_keys()),
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "Product":
        """
        Create a Product from a DynamoDB item.

        Key attributes are dropped; everything else is validated against the
        product schema.

        Raises:
            pydantic.ValidationError: If the stored record is malformed
        """
        data = {
            key: value
            for key, value in item.items()
            if not key.isupper() and not key.startswith("GSI")
        }
        return cls.model_validate(data)


def index_sort_keys(
    product_type: Optional[str],
    product_category: Optional[str],
    status: ProductStatus,
    created_at: datetime,
) -> Dict[str, str]:
    return {
        "product_type": product_index_sort_key(product_type, created_at),
        "product_category": product_index_sort_key(product_category, created_at),
        "status": product_index_sort_key(status, created_at),
    }


class CreateProductRequest(ProductFields):
    """Model for creating new products - excludes auto-generated fields."""

    name: str = Field(..., min_length=1, max_length=255)
    status: Optional[ProductStatus] = None
    media: Optional[List[ProductMediaInput]] = None


class UpdateProductRequest(ProductFields):
    """Partial update of a product; at least one field must be supplied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[ProductStatus] = None
    media: Optional[List[ProductMediaInput]] = None

    @model_validator(mode="after")
    def _not_empty(self) -> "UpdateProductRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class PriceRange(CamelModel):
    min: Optional[Decimal] = Field(None, ge=0)
    max: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "PriceRange":
        if self.min is not None and self.max is not None and self.max <= self.min:
            raise ValueError("Max price must be greater than min price")
        return self


class ProductFilter(CamelModel):
    product_type: Optional[str] = None
    product_category: Optional[str] = None
    brand: Optional[str] = None
    manufacturer: Optional[str] = None
    status: Optional[ProductStatus] = None
    price_range: Optional[PriceRange] = None


class GetProductsRequest(CamelModel):
    """
    Product list request.

    The query string is flat (``limit``, ``nextToken``, ``productType``,
    ``minPrice``, ...); ``from_query_parameters`` folds it into this shape.
    """

    limit: int = Field(20, ge=1, le=100)
    next_token: Optional[str] = None
    filter: Optional[ProductFilter] = None

    @classmethod
    def from_query_parameters(
        cls, query_params: Optional[Dict[str, Any]]
    ) -> "GetProductsRequest":
        params = dict(query_params or {})
        filter_data = {
            key: params[key]
            for key in (
                "productType",
                "productCategory",
                "brand",
                "manufacturer",
                "status",
            )
            if params.get(key)
        }
        price_range = {
            bound: params[key]
            for bound, key in (("min", "minPrice"), ("max", "maxPrice"))
            if params.get(key)
        }
        if price_range:
            filter_data["priceRange"] = price_range

        data: Dict[str, Any] = {}
        if params.get("limit"):
            data["limit"] = params["limit"]
        if params.get("nextToken"):
            data["nextToken"] = params["nextToken"]
        if filter_data:
            data["filter"] = filter_data
        return cls.model_validate(data)
