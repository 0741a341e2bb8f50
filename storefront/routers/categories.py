# storefront/routers/categories.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.database import get_session
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import CategoryCreate, CategoryRead, CategoryUpdate
from storefront.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])

service = CategoryService(ProductRepository())


@router.get("", response_model=list[CategoryRead])
def list_categories(session: Session = Depends(get_session)):
    """List all categories (public)."""
    return service.list_categories(session)


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
):
    return service.create_category(session, payload)


@router.put(
    "/{category_id}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    return service.update_category(session, category_id, payload)


@router.delete(
    "/{category_id}",
    dependencies=[Depends(require_admin)],
)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """Delete an empty category (admin only)."""
    service.delete_category(session, category_id)
    return {"message": "Category removed"}
