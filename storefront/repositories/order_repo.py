# storefront/repositories/order_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.models.order import Order, OrderItem
from storefront.models.product import Product


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def list_by_status(
        self,
        session: Session,
        statuses: list[str],
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.status.in_(statuses))
            .order_by(Order.created_at)
        )
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def get_for_update(self, session: Session, order_id: uuid.UUID) -> Order | None:
        stmt = select(Order).where(Order.id == order_id).with_for_update()
        return session.exec(stmt).first()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order

    def transition_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        from_statuses: set[str],
        to_status: str,
    ) -> bool:
        """
        Move the order to `to_status` only if it is currently in
        `from_statuses`. Returns False when another transaction got there first.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status.in_(from_statuses))
            .values(status=to_status)
            .execution_options(synchronize_session=False)
        )
        return session.exec(stmt).rowcount == 1

    # ---- Order items ----

    def list_items_for_orders(
        self,
        session: Session,
        order_ids: list[uuid.UUID],
    ) -> list[tuple[OrderItem, str | None, str | None]]:
        """
        Items for several orders, each with its product name and SKU.
        """
        if not order_ids:
            return []
        stmt = (
            select(OrderItem, Product.name, Product.sku)
            .join(Product, Product.id == OrderItem.product_id, isouter=True)
            .where(OrderItem.order_id.in_(order_ids))
        )
        return list(session.exec(stmt).all())

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return session.exec(stmt).all()

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
