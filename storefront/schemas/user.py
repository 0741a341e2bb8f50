# storefront/schemas/user.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

Role = Literal["CUSTOMER", "DRIVER", "ADMIN", "SUPER_ADMIN"]


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str
    phone: str | None
    role: Role
    wallet_balance: Decimal
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


# -------- Addresses --------


class AddressCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    street: str = Field(max_length=255)
    city: str = Field(max_length=100)
    zip: str = Field(max_length=20)

    @field_validator("street", "city", "zip")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AddressRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    street: str
    city: str
    zip: str
