# storefront/models/inventory.py
import uuid

from sqlmodel import SQLModel, Field


class Location(SQLModel, table=True):
    """
    Fulfillment location ("dark store") holding stock.
    """

    __tablename__ = "locations"

    id: str = Field(
        primary_key=True,
        max_length=64,
    )

    name: str = Field(max_length=100)

    address: str | None = None


class StockItem(SQLModel, table=True):
    """
    Quantity of one product at one location.

    Composite key (product_id, location_id); quantity never goes negative.
    """

    __tablename__ = "stock_items"

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        primary_key=True,
    )

    location_id: str = Field(
        foreign_key="locations.id",
        primary_key=True,
    )

    quantity: int = Field(
        default=0,
        ge=0,
        description="Units on hand at this location",
    )
