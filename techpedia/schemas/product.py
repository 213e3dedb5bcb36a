# techpedia/schemas/product.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from techpedia.schemas.common import PaginationMeta


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


# ---- Brands / Categories ----


class NamedCreate(SQLModel):
    """
    Payload for creating or renaming a brand or category.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class BrandRead(SQLModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime


class CategoryRead(BrandRead):
    pass


# ---- Products ----


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    stock: int = Field(ge=0)
    image_url: str | None = None
    brand_id: uuid.UUID
    category_id: uuid.UUID

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.

    The same model is produced from JSON bodies and from form-data bodies
    (see routers/products.py), so validation happens in one place.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    image_url: str | None = None
    remove_image: bool = False
    brand_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class ProductRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str | None
    price: Decimal
    stock: int
    image_url: str | None
    brand_id: uuid.UUID
    category_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class ProductDetail(ProductRead):
    """Product with its brand and category embedded."""

    brand: BrandRead | None = None
    category: CategoryRead | None = None


class ProductPage(SQLModel):
    data: list[ProductDetail]
    meta: PaginationMeta


class BrandWithProducts(BrandRead):
    products: list[ProductRead]


class CategoryWithProducts(CategoryRead):
    products: list[ProductRead]
