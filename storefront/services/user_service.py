# storefront/services/user_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.address import Address
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import AddressCreate, UserRoleUpdate, UserUpdate


class UserService:
    """
    Business logic for User and the customer address book.

    Responsibilities:
      - enforce app rules (unique email, role constraints)
      - orchestrate repository operations
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits (name, email, phone).

        Raises:
            HTTPException(400): email already used by another account.
        """
        if payload.email is not None and payload.email != current_user.email:
            if self.repo.get_by_email(session, payload.email) is not None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Email already in use",
                )
            current_user.email = payload.email

        if payload.name is not None:
            current_user.name = payload.name

        if payload.phone is not None:
            current_user.phone = payload.phone.strip() or None

        return self.repo.update(session, current_user)

    # ----- Addresses -----

    def list_addresses(self, session: Session, current_user: User) -> list[Address]:
        return self.repo.list_addresses(session, current_user.id)

    def add_address(
        self,
        session: Session,
        current_user: User,
        payload: AddressCreate,
    ) -> Address:
        address = Address(
            user_id=current_user.id,
            street=payload.street,
            city=payload.city,
            zip=payload.zip,
        )
        return self.repo.create_address(session, address)

    def delete_address(
        self,
        session: Session,
        current_user: User,
        address_id: uuid.UUID,
    ) -> None:
        address = self.repo.get_address(session, address_id)
        if not address or address.user_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Address not found",
            )
        if self.repo.count_orders_for_address(session, address.id) > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Address is used by existing orders",
            )
        self.repo.delete_address(session, address)

    # ----- Admin operations -----

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            HTTPException(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def update_role(
        self,
        session: Session,
        acting_user: User,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Only a SUPER_ADMIN may grant or revoke admin roles.
        """
        user = self.get_user(session, user_id)
        admin_roles = {"ADMIN", "SUPER_ADMIN"}
        touches_admin = payload.role in admin_roles or user.role in admin_roles
        if touches_admin and acting_user.role != "SUPER_ADMIN":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only a super admin can change admin roles",
            )
        user.role = payload.role
        return self.repo.update(session, user)
