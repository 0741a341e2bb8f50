# storefront/services/delivery_service.py
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.models.delivery import Delivery
from storefront.repositories.delivery_repo import DeliveryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.delivery import AvailableOrderRead, DeliveryRead
from storefront.schemas.order import OrderRead

# Orders a driver may pick up
ASSIGNABLE_STATUSES = ["CONFIRMED", "PACKING"]


class DeliveryService:
    """
    Driver-side fulfillment.

      accept   : CONFIRMED/PACKING order -> Delivery(ACCEPTED), order OUT_FOR_DELIVERY
      complete : Delivery(ACCEPTED)      -> DELIVERED, order DELIVERED
    """

    def __init__(
        self,
        delivery_repo: DeliveryRepository,
        order_repo: OrderRepository,
        user_repo: UserRepository,
    ):
        self.delivery_repo = delivery_repo
        self.order_repo = order_repo
        self.user_repo = user_repo

    def list_available(self, session: Session) -> list[AvailableOrderRead]:
        taken = self.delivery_repo.assigned_order_ids(session)
        orders = [
            o
            for o in self.order_repo.list_by_status(session, ASSIGNABLE_STATUSES)
            if o.id not in taken
        ]
        rows = self.order_repo.list_items_for_orders(session, [o.id for o in orders])
        counts: dict[uuid.UUID, int] = {}
        for item, *_ in rows:
            counts[item.order_id] = counts.get(item.order_id, 0) + 1

        result: list[AvailableOrderRead] = []
        for o in orders:
            customer = self.user_repo.get_by_id(session, o.user_id)
            result.append(
                AvailableOrderRead(
                    **OrderRead.model_validate(o, from_attributes=True).model_dump(),
                    customer_name=customer.name if customer else None,
                    item_count=counts.get(o.id, 0),
                )
            )
        return result

    def list_my_deliveries(
        self,
        session: Session,
        driver_id: uuid.UUID,
    ) -> list[DeliveryRead]:
        deliveries = self.delivery_repo.list_for_driver(session, driver_id)
        return [self._to_read(session, d) for d in deliveries]

    def accept(
        self,
        session: Session,
        driver_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> DeliveryRead:
        """
        Claim an order for delivery.

        Raises:
            HTTPException(404): order not found.
            HTTPException(400): order already taken or not ready.
        """
        try:
            order = self.order_repo.get_for_update(session, order_id)
            if not order:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Order not found",
                )

            if (
                order.status not in ASSIGNABLE_STATUSES
                or self.delivery_repo.get_for_order(session, order.id) is not None
            ):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Order is not available for delivery",
                )

            if not self.order_repo.transition_status(
                session, order.id, set(ASSIGNABLE_STATUSES), "OUT_FOR_DELIVERY"
            ):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Order is not available for delivery",
                )

            delivery = self.delivery_repo.add(
                session,
                Delivery(order_id=order.id, driver_id=driver_id),
            )
            delivery_id = delivery.id
            session.commit()
        except IntegrityError:
            # another driver inserted the delivery row first
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order is not available for delivery",
            )
        except Exception:
            session.rollback()
            raise

        return self._to_read(session, self.delivery_repo.get_by_id(session, delivery_id))

    def complete(
        self,
        session: Session,
        driver_id: uuid.UUID,
        delivery_id: uuid.UUID,
    ) -> DeliveryRead:
        delivery = self.delivery_repo.get_by_id(session, delivery_id)
        if not delivery or delivery.driver_id != driver_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Delivery not found",
            )

        if delivery.status != "ACCEPTED":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Delivery is already completed",
            )

        try:
            order = self.order_repo.get_for_update(session, delivery.order_id)
            delivery.status = "DELIVERED"
            delivery.delivered_at = datetime.now(timezone.utc)
            session.add(delivery)
            order.status = "DELIVERED"
            self.order_repo.update_order(session, order)
            session.commit()
        except Exception:
            session.rollback()
            raise

        return self._to_read(session, delivery)

    def _to_read(self, session: Session, delivery: Delivery) -> DeliveryRead:
        order = self.order_repo.get_by_id(session, delivery.order_id)
        return DeliveryRead(
            id=delivery.id,
            order_id=delivery.order_id,
            driver_id=delivery.driver_id,
            status=delivery.status,
            accepted_at=delivery.accepted_at,
            delivered_at=delivery.delivered_at,
            order=OrderRead.model_validate(order, from_attributes=True),
        )
