# storefront/schemas/order.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal[
    "PENDING",
    "CONFIRMED",
    "PACKING",
    "OUT_FOR_DELIVERY",
    "DELIVERED",
    "CANCELLED",
]
PaymentMethod = Literal["WALLET", "CASH", "UPI"]


class CartLine(SQLModel):
    """
    One line of the client cart.

    `price` is what the client saw; it is informational only; the
    server always charges the current catalog price.
    """

    id: uuid.UUID = Field(description="Product id")
    quantity: int = Field(gt=0)
    price: Decimal | None = None


class OrderCreate(SQLModel):
    """
    Checkout payload sent by the storefront.

    Accepts the camelCase keys the browser client sends
    (cartItems, totalPrice, addressId, paymentMethod).

    Backend derives:
      - user_id from token
      - location_id from configuration
      - status = 'PENDING'
      - item prices and total from the catalog
    """

    model_config = ConfigDict(populate_by_name=True)

    cart_items: list[CartLine] = Field(alias="cartItems")
    total_price: Decimal = Field(alias="totalPrice", ge=0)
    address_id: uuid.UUID = Field(alias="addressId")
    payment_method: PaymentMethod = Field(default="CASH", alias="paymentMethod")

    @field_validator("payment_method", mode="before")
    @classmethod
    def normalize_payment_method(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    product_sku: str | None = None
    quantity: int
    price: Decimal
    line_total: Decimal


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    location_id: str
    address_id: uuid.UUID | None
    payment_method: PaymentMethod
    status: OrderStatus
    total_price: Decimal
    created_at: datetime


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class AdminOrderRead(OrderWithItemsRead):
    """
    Back-office order view: adds who placed the order.
    """

    customer_name: str | None = None
    customer_email: str | None = None


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().upper()
        return v
