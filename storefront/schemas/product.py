# storefront/schemas/product.py
import re
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

SKU_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def _normalize_sku(v: str) -> str:
    v = v.strip().upper()
    if not SKU_PATTERN.match(v):
        raise ValueError("sku may only contain letters, digits, '-' and '_'")
    return v


# -------- Categories --------


class CategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str | None


# -------- Products --------


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - `stock` seeds the StockItem at the fulfillment location.
    - Accepts camelCase keys from the admin client (categoryId, imageUrl).
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(max_length=200)
    sku: str = Field(max_length=64)
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    description: str | None = None
    category_id: uuid.UUID = Field(alias="categoryId")
    stock: int = Field(default=0, ge=0)
    image_url: str | None = Field(default=None, alias="imageUrl")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, v: str) -> str:
        return _normalize_sku(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional; `stock` upserts the fulfillment-location row.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = Field(default=None, max_length=200)
    sku: str | None = Field(default=None, max_length=64)
    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    description: str | None = None
    category_id: uuid.UUID | None = Field(default=None, alias="categoryId")
    stock: int | None = Field(default=None, ge=0)
    image_url: str | None = Field(default=None, alias="imageUrl")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _normalize_sku(v)


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    sku: str
    name: str
    price: Decimal
    description: str | None
    category_id: uuid.UUID
    image_url: str | None
    created_at: datetime


class ProductListItem(ProductRead):
    """Catalog listing entry; stock summed over all locations."""

    category: CategoryRead | None = None
    total_stock: int


class ProductDetail(ProductRead):
    """Single product; stock at the fulfillment location."""

    category: CategoryRead | None = None
    stock: int


# -------- Dashboard --------


class CategoryProductCount(SQLModel):
    """Products per category, for the admin pie chart."""

    name: str
    count: int


class LowStockItem(SQLModel):
    product_id: uuid.UUID
    location_id: str
    quantity: int
    product_name: str
    sku: str
