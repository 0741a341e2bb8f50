# storefront/repositories/user_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.address import Address
from storefront.models.order import Order
from storefront.models.user import User


class UserRepository:
    """
    Data access layer for User and Address.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Users -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def list_users(self, session: Session, skip: int = 0, limit: int = 50) -> list[User]:
        """
        Paginated user listing.

        Args:
            skip: offset rows (for paging)
            limit: max number of rows returned
        """
        stmt = select(User).order_by(User.created_at).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    # ----- Addresses -----

    def list_addresses(self, session: Session, user_id: uuid.UUID) -> list[Address]:
        stmt = select(Address).where(Address.user_id == user_id)
        return session.exec(stmt).all()

    def get_address(self, session: Session, address_id: uuid.UUID) -> Address | None:
        return session.get(Address, address_id)

    def create_address(self, session: Session, address: Address) -> Address:
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    def delete_address(self, session: Session, address: Address) -> None:
        session.delete(address)
        session.commit()

    def count_orders_for_address(self, session: Session, address_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(Order)
            .where(Order.address_id == address_id)
        )
        return int(session.exec(stmt).one() or 0)
