# storefront/services/category_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.product import Category
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import CategoryCreate, CategoryUpdate


class CategoryService:
    """
    Business logic for product categories.

      - category names are unique (case-insensitive)
      - a category still holding products cannot be deleted
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_categories(self, session: Session) -> list[Category]:
        return self.repo.list_categories(session)

    def get_category(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.repo.get_category(session, category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        return category

    def _ensure_unique_name(
        self,
        session: Session,
        name: str,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        existing = self.repo.get_category_by_name(session, name)
        if existing is not None and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category with this name already exists",
            )

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        self._ensure_unique_name(session, payload.name)
        category = Category(name=payload.name, description=payload.description)
        return self.repo.save_category(session, category)

    def update_category(
        self,
        session: Session,
        category_id: uuid.UUID,
        payload: CategoryUpdate,
    ) -> Category:
        category = self.get_category(session, category_id)

        if payload.name is not None:
            self._ensure_unique_name(session, payload.name, exclude_id=category.id)
            category.name = payload.name

        if payload.description is not None:
            category.description = payload.description

        return self.repo.save_category(session, category)

    def delete_category(self, session: Session, category_id: uuid.UUID) -> None:
        category = self.get_category(session, category_id)
        if self.repo.count_products_in_category(session, category.id) > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete category. It still has products.",
            )
        self.repo.delete_category(session, category)
