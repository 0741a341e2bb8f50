# storefront/schemas/delivery.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel

from storefront.schemas.order import OrderRead

DeliveryStatus = Literal["ACCEPTED", "DELIVERED"]


class AvailableOrderRead(OrderRead):
    """Order waiting for a driver, with its item count."""

    customer_name: str | None = None
    item_count: int


class DeliveryRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    driver_id: uuid.UUID
    status: DeliveryStatus
    accepted_at: datetime
    delivered_at: datetime | None
    order: OrderRead
