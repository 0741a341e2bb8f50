# storefront/models/address.py
import uuid

from sqlmodel import SQLModel, Field


class Address(SQLModel, table=True):
    """
    Delivery address saved in a customer's address book.
    """

    __tablename__ = "addresses"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    street: str = Field(max_length=255)
    city: str = Field(max_length=100)
    zip: str = Field(max_length=20)
