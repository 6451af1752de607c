"""Product schemas"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from storefront.models.enums import Category
from storefront.schemas.common import CamelModel

SortField = Literal["createdAt", "updatedAt", "name", "price", "stock"]
SortOrder = Literal["asc", "desc"]


def _normalise_category(value):
    # Clients send categories in any case ("rings", "Rings")
    if isinstance(value, str):
        return value.strip().upper()
    return value


def _positive_price(value):
    if value is not None and value <= 0:
        raise ValueError("Price must be greater than 0")
    return value


class ProductCreate(CamelModel):
    """Schema for creating a product. Unknown keys are rejected."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., allow_inf_nan=False)
    category: Category
    material: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    dimensions: Optional[str] = None
    gemstone: Optional[str] = None
    images: List[str] = Field(default_factory=list, description="Image URLs already hosted elsewhere")
    stock: int = Field(0, ge=0)
    is_active: bool = True

    class Config:
        extra = "forbid"

    @field_validator("category", mode="before")
    @classmethod
    def normalise_category(cls, value):
        return _normalise_category(value)

    @field_validator("price")
    @classmethod
    def check_price(cls, value):
        return _positive_price(value)


class ProductUpdate(CamelModel):
    """Partial update; only keys present in the request are applied"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    category: Optional[Category] = None
    material: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    dimensions: Optional[str] = None
    gemstone: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

    @field_validator("category", mode="before")
    @classmethod
    def normalise_category(cls, value):
        return _normalise_category(value)

    @field_validator("price")
    @classmethod
    def check_price(cls, value):
        return _positive_price(value)


class ProductResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    category: str
    material: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    gemstone: Optional[str] = None
    images: List[str]
    stock: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductQuery(CamelModel):
    """Pagination, sorting and filters for product listings"""

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"
    category: Optional[str] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total: int
    limit: int


class ProductPage(CamelModel):
    products: List[ProductResponse]
    pagination: Pagination
