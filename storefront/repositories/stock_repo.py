# storefront/repositories/stock_repo.py
import uuid

from sqlalchemy import func, update
from sqlmodel import Session, select

from storefront.models.inventory import Location, StockItem
from storefront.models.product import Product


class StockRepository:
    """
    Data access layer for locations and per-location stock.

    NOTE:
      - No commits here; stock changes are always part of a larger
        transaction (checkout, cancellation, product edit).
    """

    # ---- Locations ----

    def get_location(self, session: Session, location_id: str) -> Location | None:
        return session.get(Location, location_id)

    def create_location(self, session: Session, location: Location) -> Location:
        session.add(location)
        session.flush()
        return location

    # ---- Stock rows ----

    def get(
        self,
        session: Session,
        product_id: uuid.UUID,
        location_id: str,
    ) -> StockItem | None:
        return session.get(StockItem, (product_id, location_id))

    def lock_for_products(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
        location_id: str,
    ) -> dict[uuid.UUID, StockItem]:
        """
        Read stock rows for the given products with SELECT ... FOR UPDATE.

        Rows are locked in product-id order so two checkouts touching the
        same products cannot deadlock each other.
        """
        if not product_ids:
            return {}
        stmt = (
            select(StockItem)
            .where(
                StockItem.location_id == location_id,
                StockItem.product_id.in_(product_ids),
            )
            .order_by(StockItem.product_id)
            .with_for_update()
        )
        return {row.product_id: row for row in session.exec(stmt).all()}

    def decrement(
        self,
        session: Session,
        product_id: uuid.UUID,
        location_id: str,
        quantity: int,
    ) -> bool:
        """
        Atomically subtract `quantity` if enough is on hand.

        Returns False (and changes nothing) when the row is missing or
        holds less than `quantity`.
        """
        stmt = (
            update(StockItem)
            .where(
                StockItem.product_id == product_id,
                StockItem.location_id == location_id,
                StockItem.quantity >= quantity,
            )
            .values(quantity=StockItem.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        result = session.exec(stmt)
        return result.rowcount == 1

    def increment(
        self,
        session: Session,
        product_id: uuid.UUID,
        location_id: str,
        quantity: int,
    ) -> None:
        """
        Put `quantity` units back, creating the row if it disappeared.
        """
        stmt = (
            update(StockItem)
            .where(
                StockItem.product_id == product_id,
                StockItem.location_id == location_id,
            )
            .values(quantity=StockItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        result = session.exec(stmt)
        if result.rowcount == 0:
            session.add(
                StockItem(
                    product_id=product_id,
                    location_id=location_id,
                    quantity=quantity,
                )
            )
            session.flush()

    def set_quantity(
        self,
        session: Session,
        product_id: uuid.UUID,
        location_id: str,
        quantity: int,
    ) -> StockItem:
        """Upsert the stock row to an absolute quantity."""
        item = self.get(session, product_id, location_id)
        if item is None:
            item = StockItem(
                product_id=product_id,
                location_id=location_id,
                quantity=quantity,
            )
        else:
            item.quantity = quantity
        session.add(item)
        session.flush()
        return item

    def quantity_at(
        self,
        session: Session,
        product_id: uuid.UUID,
        location_id: str,
    ) -> int:
        item = self.get(session, product_id, location_id)
        return item.quantity if item else 0

    def totals_by_product(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, int]:
        """Sum of stock over every location, keyed by product id."""
        if not product_ids:
            return {}
        stmt = (
            select(StockItem.product_id, func.sum(StockItem.quantity))
            .where(StockItem.product_id.in_(product_ids))
            .group_by(StockItem.product_id)
        )
        return {pid: int(total or 0) for pid, total in session.exec(stmt).all()}

    def list_low_stock(
        self,
        session: Session,
        threshold: int,
    ) -> list[tuple[StockItem, str, str]]:
        """
        Stock rows at or below `threshold`, lowest first, each with the
        product name and SKU.
        """
        stmt = (
            select(StockItem, Product.name, Product.sku)
            .join(Product, Product.id == StockItem.product_id)
            .where(StockItem.quantity <= threshold)
            .order_by(StockItem.quantity, Product.name)
        )
        return list(session.exec(stmt).all())

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        stmt = select(StockItem).where(StockItem.product_id == product_id)
        for row in session.exec(stmt).all():
            session.delete(row)
        session.flush()
