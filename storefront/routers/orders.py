# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_admin, require_customer
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.delivery_repo import DeliveryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.stats_repo import StatsRepository
from storefront.repositories.stock_repo import StockRepository
from storefront.repositories.user_repo import UserRepository
from storefront.repositories.wallet_repo import WalletRepository
from storefront.schemas.order import (
    AdminOrderRead,
    OrderCreate,
    OrderWithItemsRead,
    OrderStatusUpdate,
)
from storefront.schemas.stats import OrderCountPoint, RevenuePoint, StatsPeriod
from storefront.services.order_service import OrderService
from storefront.services.stats_service import StatsService

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(
    order_repo=OrderRepository(),
    product_repo=ProductRepository(),
    stock_repo=StockRepository(),
    wallet_repo=WalletRepository(),
    user_repo=UserRepository(),
    delivery_repo=DeliveryRepository(),
    location_id=settings.FULFILLMENT_LOCATION_ID,
)
stats_service = StatsService(StatsRepository())


# -------- Customer endpoints --------


@router.post(
    "",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Place an order from the client cart.

    Stock, prices and (for WALLET) balance are re-checked server-side;
    400 on insufficient stock/balance or a stale total.
    """
    return service.create_order(session, current_user.id, payload)


@router.get("/myorders", response_model=list[OrderWithItemsRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated customer's orders with items, newest first.
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.post("/{order_id}/cancel", response_model=OrderWithItemsRead)
def cancel_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer),
):
    """
    Cancel one of the customer's orders (PENDING / CONFIRMED only).
    """
    return service.cancel_order(session, current_user.id, order_id)


# -------- Admin endpoints --------


@router.get(
    "/stats",
    response_model=list[RevenuePoint],
    dependencies=[Depends(require_admin)],
)
def get_order_stats(
    period: StatsPeriod = "monthly",
    session: Session = Depends(get_session),
):
    """
    Revenue of delivered orders per day/week/month/year.
    """
    return stats_service.revenue_stats(session, period)


@router.get(
    "/stats/count",
    response_model=list[OrderCountPoint],
    dependencies=[Depends(require_admin)],
)
def get_order_count_stats(
    period: StatsPeriod = "monthly",
    session: Session = Depends(get_session),
):
    """
    Number of orders (any status) per day/week/month/year.
    """
    return stats_service.order_count_stats(session, period)


@router.get(
    "",
    response_model=list[AdminOrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders (admin only).
    """
    return service.list_all_orders(session, skip, limit)


@router.get(
    "/{order_id}",
    response_model=AdminOrderRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    return service.get_order_admin(session, order_id)


@router.put(
    "/{order_id}/status",
    response_model=AdminOrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only).

      PENDING <-> CONFIRMED <-> PACKING

    Orders accepted by a driver, delivered or cancelled are read-only here.
    """
    return service.update_status(session, order_id, payload)
