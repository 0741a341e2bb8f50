# storefront/routers/users.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_admin, require_auth, require_customer
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    AddressCreate,
    AddressRead,
    UserRead,
    UserRoleUpdate,
    UserUpdate,
)
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/profile", response_model=UserRead)
def read_profile(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return service.get_me(current_user)


@router.put("/profile", response_model=UserRead)
def update_profile(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update name, email or phone (partial update).
    """
    return service.update_me(session, current_user, payload)


# -------- Address book --------


@router.get("/addresses", response_model=list[AddressRead])
def list_addresses(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    return service.list_addresses(session, current_user)


@router.post(
    "/addresses",
    response_model=AddressRead,
    status_code=status.HTTP_201_CREATED,
)
def add_address(
    payload: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Add a delivery address (street, city and zip are required).
    """
    return service.add_address(session, current_user, payload)


@router.delete("/addresses/{address_id}")
def delete_address(
    address_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
) -> dict[str, str]:
    service.delete_address(session, current_user, address_id)
    return {"message": "Address removed"}


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all users (admin only).

    Pagination via skip/limit.
    """
    return service.list_users(session, skip, limit)


@router.patch("/{user_id}/role", response_model=UserRead)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    """
    Update a user's role (admin only).

    Granting or revoking ADMIN / SUPER_ADMIN needs a SUPER_ADMIN.
    """
    return service.update_role(session, current_user, user_id, payload)
