# storefront/models/wallet.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class WalletTransaction(SQLModel, table=True):
    """
    Append-only wallet ledger entry.

    `amount` is always positive; `type` carries the sign:
      - CREDIT: top-ups and refunds
      - DEBIT : wallet-paid orders
    """

    __tablename__ = "wallet_transactions"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    amount: Decimal = Field(
        gt=0,
        max_digits=12,
        decimal_places=2,
    )

    # CREDIT | DEBIT
    type: str = Field(index=True)

    description: str = Field(max_length=255)

    order_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="orders.id",
        index=True,
        description="Order that caused this entry, if any",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == "CREDIT" else -self.amount
