"""Pydantic models describing Product payloads.

Wire format is camelCase (``isEnabled``, ``imageUrl``); Python code uses the
snake_case field names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    RootModel,
    StrictBool,
    StringConstraints,
)
from pydantic.alias_generators import to_camel

MAX_BULK_UPLOAD = 1000

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
ProductDescription = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)
]
CategoryName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Sku = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True)]
FilterText = Annotated[str, StringConstraints(strip_whitespace=True)]
ImageUrl = HttpUrl | Literal[""]

SortField = Literal["name", "price", "createdAt", "updatedAt"]
SortOrder = Literal["asc", "desc"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductCreate(CamelModel):
    """Schema for UI-created products and bulk upload rows."""

    name: ProductName
    description: ProductDescription
    price: float = Field(..., ge=0)
    category: CategoryName
    sku: Sku
    image_url: ImageUrl | None = None
    is_enabled: bool | None = None
    stock: int = Field(0, ge=0)
    tags: list[Tag] = Field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        """Column values for an insert; unset optionals fall back to DB defaults."""
        return self.model_dump(mode="json", exclude_none=True)


class ProductUpdate(CamelModel):
    """Partial update; only provided fields are written."""

    name: ProductName | None = None
    description: ProductDescription | None = None
    price: float | None = Field(None, ge=0)
    category: CategoryName | None = None
    sku: Sku | None = None
    image_url: ImageUrl | None = None
    is_enabled: bool | None = None
    stock: int | None = Field(None, ge=0)
    tags: list[Tag] | None = None

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)


class ProductStatusUpdate(CamelModel):
    is_enabled: StrictBool


class BulkUploadRequest(RootModel[list[ProductCreate]]):
    root: list[ProductCreate] = Field(..., min_length=1, max_length=MAX_BULK_UPLOAD)


class ProductRead(CamelModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    sku: str
    image_url: str | None = None
    is_enabled: bool
    stock: int
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict, identical whether built fresh or read from cache."""
        return self.model_dump(mode="json", by_alias=True)


class ProductQuery(CamelModel):
    """Listing filters; also the canonical input for listing cache keys.

    Text filters are trimmed here so the cache key and the store filter see
    the same value.
    """

    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    category: FilterText | None = None
    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)
    search: FilterText | None = None
    is_enabled: bool | None = None
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    total_enabled_count: int
    total_disabled_count: int
    has_next: bool
    has_prev: bool
    limit: int


class ProductListResponse(CamelModel):
    products: list[ProductRead]
    pagination: Pagination


class BulkUploadResult(CamelModel):
    message: str
    created: int
    disabled: int


class MessageResponse(BaseModel):
    message: str
