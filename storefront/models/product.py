# storefront/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Product category (e.g. "Dairy", "Fruits & Vegetables").
    """

    __tablename__ = "categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    description: str | None = None


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Stock is not stored here; see StockItem (per fulfillment location).
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    sku: str = Field(
        max_length=64,
        unique=True,
        index=True,
        description="Stock keeping unit (unique)",
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the product",
    )

    price: Decimal = Field(
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Current unit price",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    category_id: uuid.UUID = Field(
        foreign_key="categories.id",
        index=True,
    )

    image_url: str | None = Field(
        default=None,
        description="Public image URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
