# storefront/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order.

    total_price equals the sum of its items' price * quantity at creation.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    location_id: str = Field(
        foreign_key="locations.id",
        index=True,
        description="Fulfillment location the stock was taken from",
    )

    address_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="addresses.id",
        description="Delivery address",
    )

    # WALLET | CASH | UPI
    payment_method: str = Field(
        default="CASH",
        description="How the order is paid",
    )

    total_price: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="Sum of item price * quantity",
    )

    # PENDING | CONFIRMED | PACKING | OUT_FOR_DELIVERY | DELIVERED | CANCELLED
    status: str = Field(
        default="PENDING",
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    `price` is the unit price captured when the order was placed.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: Decimal = Field(
        max_digits=12,
        decimal_places=2,
        description="Unit price at time of order",
    )
