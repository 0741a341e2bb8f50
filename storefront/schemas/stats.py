# storefront/schemas/stats.py
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

StatsPeriod = Literal["daily", "weekly", "monthly", "yearly"]


class RevenuePoint(SQLModel):
    """
    Revenue of delivered orders for one bucket (day/week/month/year start).
    """
    model_config = ConfigDict(extra="forbid")

    date: str
    total: Decimal


class OrderCountPoint(SQLModel):
    """
    Number of orders (any status) placed in one bucket.
    """
    model_config = ConfigDict(extra="forbid")

    date: str
    total: int
