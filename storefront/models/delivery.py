# storefront/models/delivery.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Delivery(SQLModel, table=True):
    """
    Driver assignment for an order.

    At most one delivery per order; once it exists the order is managed
    by the driver (OUT_FOR_DELIVERY -> DELIVERED).
    """

    __tablename__ = "deliveries"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        unique=True,
        index=True,
    )

    driver_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # ACCEPTED | DELIVERED
    status: str = Field(default="ACCEPTED", index=True)

    accepted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    delivered_at: datetime | None = None
