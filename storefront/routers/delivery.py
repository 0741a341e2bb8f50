# storefront/routers/delivery.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_driver
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.delivery_repo import DeliveryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.delivery import AvailableOrderRead, DeliveryRead
from storefront.services.delivery_service import DeliveryService

router = APIRouter(prefix="/delivery", tags=["Delivery"])

service = DeliveryService(DeliveryRepository(), OrderRepository(), UserRepository())


@router.get("/available", response_model=list[AvailableOrderRead])
def list_available_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_driver),
):
    """
    Confirmed / packing orders that no driver has accepted yet.
    """
    return service.list_available(session)


@router.get("/my-deliveries", response_model=list[DeliveryRead])
def list_my_deliveries(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_driver),
):
    return service.list_my_deliveries(session, current_user.id)


@router.post(
    "/{order_id}/accept",
    response_model=DeliveryRead,
    status_code=status.HTTP_201_CREATED,
)
def accept_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_driver),
):
    """
    Take an order; it moves to OUT_FOR_DELIVERY.
    """
    return service.accept(session, current_user.id, order_id)


@router.put("/{delivery_id}/complete", response_model=DeliveryRead)
def complete_delivery(
    delivery_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_driver),
):
    """
    Mark one of the driver's deliveries (and its order) as DELIVERED.
    """
    return service.complete(session, current_user.id, delivery_id)
