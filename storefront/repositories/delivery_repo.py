# storefront/repositories/delivery_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.delivery import Delivery


class DeliveryRepository:
    """
    Data access layer for driver deliveries. The service commits.
    """

    def get_by_id(self, session: Session, delivery_id: uuid.UUID) -> Delivery | None:
        return session.get(Delivery, delivery_id)

    def get_for_order(self, session: Session, order_id: uuid.UUID) -> Delivery | None:
        stmt = select(Delivery).where(Delivery.order_id == order_id)
        return session.exec(stmt).first()

    def assigned_order_ids(self, session: Session) -> set[uuid.UUID]:
        return set(session.exec(select(Delivery.order_id)).all())

    def list_for_driver(
        self,
        session: Session,
        driver_id: uuid.UUID,
    ) -> list[Delivery]:
        stmt = (
            select(Delivery)
            .where(Delivery.driver_id == driver_id)
            .order_by(Delivery.accepted_at.desc())
        )
        return session.exec(stmt).all()

    def add(self, session: Session, delivery: Delivery) -> Delivery:
        session.add(delivery)
        session.flush()
        return delivery
