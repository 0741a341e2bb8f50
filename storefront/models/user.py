# storefront/models/user.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match the auth provider's user id (UUID from JWT "sub")

    Role:
      - "CUSTOMER" | "DRIVER" | "ADMIN" | "SUPER_ADMIN"

    Wallet:
      - wallet_balance mirrors the signed sum of the user's
        wallet_transactions rows and never drops below zero.

    This table is *not* responsible for password hashes. The auth provider
    stores credentials; we only mirror identity, profile and role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the auth provider's user id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the auth token",
    )

    name: str = Field(
        max_length=100,
        description="Display name; first part of email by default",
    )

    phone: str | None = Field(
        default=None,
        max_length=30,
    )

    role: str = Field(
        default="CUSTOMER",
        index=True,
        description="Application role: CUSTOMER | DRIVER | ADMIN | SUPER_ADMIN",
    )

    wallet_balance: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Current wallet balance",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
