# storefront/repositories/product_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.order import OrderItem
from storefront.models.product import Category, Product


class ProductRepository:
    """
    Data access layer for Product & Category.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Product writes only flush; the service commits together with
      the matching stock change.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_sku(self, session: Session, sku: str) -> Product | None:
        stmt = select(Product).where(Product.sku == sku)
        return session.exec(stmt).first()

    def get_many(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def list_products(
        self,
        session: Session,
        search: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Product]:
        stmt = select(Product)
        if search:
            stmt = stmt.where(func.lower(Product.name).contains(search.lower()))
        stmt = stmt.order_by(Product.name).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def add(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.flush()
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.flush()

    def count_order_items(self, session: Session, product_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(OrderItem)
            .where(OrderItem.product_id == product_id)
        )
        return int(session.exec(stmt).one() or 0)

    # ----- Categories -----

    def list_categories(self, session: Session) -> list[Category]:
        return session.exec(select(Category).order_by(Category.name)).all()

    def get_category(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return session.get(Category, category_id)

    def get_categories(
        self,
        session: Session,
        category_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, Category]:
        if not category_ids:
            return {}
        stmt = select(Category).where(Category.id.in_(category_ids))
        return {c.id: c for c in session.exec(stmt).all()}

    def get_category_by_name(self, session: Session, name: str) -> Category | None:
        stmt = select(Category).where(func.lower(Category.name) == name.lower())
        return session.exec(stmt).first()

    def save_category(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete_category(self, session: Session, category: Category) -> None:
        session.delete(category)
        session.commit()

    def count_products_in_category(
        self,
        session: Session,
        category_id: uuid.UUID,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(Product)
            .where(Product.category_id == category_id)
        )
        return int(session.exec(stmt).one() or 0)

    def product_counts_by_category(self, session: Session) -> list[tuple[str, int]]:
        """(category name, number of products) for every category, empty ones included."""
        stmt = (
            select(Category.name, func.count(Product.id))
            .join(Product, Product.category_id == Category.id, isouter=True)
            .group_by(Category.id, Category.name)
            .order_by(Category.name)
        )
        return [(name, int(count or 0)) for name, count in session.exec(stmt).all()]
