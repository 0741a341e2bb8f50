# storefront/services/product_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.inventory import Location
from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.stock_repo import StockRepository
from storefront.schemas.product import (
    CategoryProductCount,
    CategoryRead,
    LowStockItem,
    ProductCreate,
    ProductDetail,
    ProductListItem,
    ProductRead,
    ProductUpdate,
)

logger = logging.getLogger(__name__)

# Quantity at or below which a stock row shows up on the low-stock list
LOW_STOCK_THRESHOLD = 20


class ProductService:
    """
    Business logic for the catalog and fulfillment-location stock.

    Responsibilities:
      - SKU uniqueness
      - category existence checks
      - keeping the StockItem at the fulfillment location in step with
        product create/update/delete (one transaction each)
      - refusing to delete products referenced by orders
    """

    def __init__(
        self,
        repo: ProductRepository,
        stock_repo: StockRepository,
        location_id: str,
    ):
        self.repo = repo
        self.stock_repo = stock_repo
        self.location_id = location_id

    # ----- Helpers -----

    def ensure_fulfillment_location(self, session: Session, name: str) -> Location:
        """
        Create the configured fulfillment location if it is missing.
        Called once on startup.
        """
        location = self.stock_repo.get_location(session, self.location_id)
        if location is None:
            location = self.stock_repo.create_location(
                session, Location(id=self.location_id, name=name)
            )
            session.commit()
            logger.info("Created fulfillment location %s", self.location_id)
        return location

    def _ensure_unique_sku(
        self,
        session: Session,
        sku: str,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        existing = self.repo.get_by_sku(session, sku)
        if existing is not None and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product with this SKU already exists",
            )

    def _ensure_category(self, session: Session, category_id: uuid.UUID) -> None:
        if self.repo.get_category(session, category_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category not found",
            )

    def _category_read(self, session: Session, category_id: uuid.UUID) -> CategoryRead | None:
        category = self.repo.get_category(session, category_id)
        return CategoryRead.model_validate(category) if category else None

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        search: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ProductListItem]:
        """
        Catalog listing with total stock across all locations.
        """
        products = self.repo.list_products(session, search=search, skip=skip, limit=limit)
        ids = [p.id for p in products]
        totals = self.stock_repo.totals_by_product(session, ids)
        categories = self.repo.get_categories(session, list({p.category_id for p in products}))

        result: list[ProductListItem] = []
        for p in products:
            category = categories.get(p.category_id)
            result.append(
                ProductListItem(
                    **ProductRead.model_validate(p).model_dump(),
                    category=CategoryRead.model_validate(category) if category else None,
                    total_stock=totals.get(p.id, 0),
                )
            )
        return result

    def _get_product_row(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def get_product(self, session: Session, product_id: uuid.UUID) -> ProductDetail:
        """
        Single product with its stock at the fulfillment location.
        """
        product = self._get_product_row(session, product_id)
        return ProductDetail(
            **ProductRead.model_validate(product).model_dump(),
            category=self._category_read(session, product.category_id),
            stock=self.stock_repo.quantity_at(session, product.id, self.location_id),
        )

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> ProductDetail:
        """
        Create a product and its initial stock row in one transaction.
        """
        self._ensure_unique_sku(session, payload.sku)
        self._ensure_category(session, payload.category_id)

        try:
            product = self.repo.add(
                session,
                Product(
                    sku=payload.sku,
                    name=payload.name,
                    price=payload.price,
                    description=payload.description,
                    category_id=payload.category_id,
                    image_url=payload.image_url or None,
                ),
            )
            self.stock_repo.set_quantity(
                session, product.id, self.location_id, payload.stock
            )
            product_id = product.id
            session.commit()
        except Exception:
            session.rollback()
            raise

        return self.get_product(session, product_id)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> ProductDetail:
        """
        Partial update of a product.

        - If sku is changed, enforce uniqueness.
        - `stock` sets the absolute quantity at the fulfillment location.
        - Existing OrderItem prices are never touched.
        """
        product = self._get_product_row(session, product_id)

        if payload.sku is not None and payload.sku != product.sku:
            self._ensure_unique_sku(session, payload.sku, exclude_id=product.id)
            product.sku = payload.sku

        if payload.category_id is not None:
            self._ensure_category(session, payload.category_id)
            product.category_id = payload.category_id

        if payload.name is not None:
            product.name = payload.name

        if payload.price is not None:
            product.price = payload.price

        if payload.description is not None:
            product.description = payload.description

        if "image_url" in payload.model_fields_set:
            product.image_url = payload.image_url or None

        try:
            self.repo.add(session, product)
            if payload.stock is not None:
                self.stock_repo.set_quantity(
                    session, product.id, self.location_id, payload.stock
                )
            session.commit()
        except Exception:
            session.rollback()
            raise

        return self.get_product(session, product_id)

    def delete_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product and its stock rows.

        Products that appear in any order are kept (400).
        """
        product = self._get_product_row(session, product_id)

        if self.repo.count_order_items(session, product.id) > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete product. It is part of existing orders.",
            )

        try:
            self.stock_repo.delete_for_product(session, product.id)
            self.repo.delete(session, product)
            session.commit()
        except Exception:
            session.rollback()
            raise

    # ----- Dashboard -----

    def category_stats(self, session: Session) -> list[CategoryProductCount]:
        return [
            CategoryProductCount(name=name, count=count)
            for name, count in self.repo.product_counts_by_category(session)
        ]

    def low_stock(
        self,
        session: Session,
        threshold: int = LOW_STOCK_THRESHOLD,
    ) -> list[LowStockItem]:
        """
        Stock rows (any location) with quantity <= threshold, lowest first.
        """
        return [
            LowStockItem(
                product_id=item.product_id,
                location_id=item.location_id,
                quantity=item.quantity,
                product_name=name,
                sku=sku,
            )
            for item, name, sku in self.stock_repo.list_low_stock(session, threshold)
        ]
