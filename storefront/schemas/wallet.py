# storefront/schemas/wallet.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

TransactionType = Literal["CREDIT", "DEBIT"]


class WalletTopUp(SQLModel):
    """
    Payload for adding money to the wallet.

    Positivity is checked by the service so that a zero/negative amount
    is reported as a business-rule violation (400).
    """

    model_config = ConfigDict(extra="forbid")

    amount: Decimal = Field(max_digits=12, decimal_places=2)


class WalletTransactionRead(SQLModel):
    id: uuid.UUID
    amount: Decimal
    type: TransactionType
    description: str
    order_id: uuid.UUID | None
    created_at: datetime


class WalletBalanceRead(SQLModel):
    wallet_balance: Decimal


class WalletRead(WalletBalanceRead):
    """
    Balance plus the most recent ledger entries (newest first).
    """

    transactions: list[WalletTransactionRead]
