# storefront/services/order_service.py
import logging
import uuid
from decimal import Decimal

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.order import Order, OrderItem
from storefront.models.wallet import WalletTransaction
from storefront.repositories.delivery_repo import DeliveryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.stock_repo import StockRepository
from storefront.repositories.user_repo import UserRepository
from storefront.repositories.wallet_repo import WalletRepository
from storefront.schemas.order import (
    AdminOrderRead,
    CartLine,
    OrderCreate,
    OrderItemRead,
    OrderWithItemsRead,
    OrderStatusUpdate,
)

logger = logging.getLogger(__name__)

# States an admin may put an order into (and move it out of)
ADMIN_SETTABLE_STATUSES = {"PENDING", "CONFIRMED", "PACKING"}

# States from which a customer may still cancel
CUSTOMER_CANCELLABLE_STATUSES = {"PENDING", "CONFIRMED"}

# Largest accepted gap between the client total and the server total
PRICE_TOLERANCE = Decimal("0.01")

CENT = Decimal("0.01")


def insufficient_stock(product_id: uuid.UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Not enough stock for product ID: {product_id}",
    )


def insufficient_balance() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Insufficient wallet balance",
    )


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Checkout: validate the submitted cart against live stock and
        live prices, create order + items, deduct stock, debit wallet,
        all in one transaction
      - Customer cancellation (restock + wallet refund)
      - Admin status transitions (PENDING / CONFIRMED / PACKING only)
      - Order listings with nested items
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        stock_repo: StockRepository,
        wallet_repo: WalletRepository,
        user_repo: UserRepository,
        delivery_repo: DeliveryRepository,
        location_id: str,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.stock_repo = stock_repo
        self.wallet_repo = wallet_repo
        self.user_repo = user_repo
        self.delivery_repo = delivery_repo
        self.location_id = location_id

    # -------- User-facing operations --------

    def create_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Place an order from the client cart.

        Steps (single transaction):
          1. Merge cart lines; error if empty.
          2. Check the delivery address belongs to the user.
          3. Lock stock rows at the fulfillment location; every line must
             be covered.
          4. Price every line from the catalog and compare with the
             client total.
          5. Wallet payment: lock user row and check balance.
          6. Deduct stock (conditional update per row).
          7. Create Order (status='PENDING') and OrderItem rows.
          8. Wallet payment: debit balance + DEBIT ledger row.
          9. Commit. Any failure rolls everything back.
        """
        lines = self._merge_lines(payload.cart_items)
        if not lines:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No items in cart",
            )

        try:
            # 2) Address
            address = self.user_repo.get_address(session, payload.address_id)
            if not address or address.user_id != user_id:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Address not found",
                )

            # 3) Stock check under row locks
            product_ids = sorted(lines)
            stock_rows = self.stock_repo.lock_for_products(
                session, product_ids, self.location_id
            )
            for product_id in product_ids:
                row = stock_rows.get(product_id)
                if row is None or row.quantity < lines[product_id]:
                    raise insufficient_stock(product_id)

            # 4) Server-side pricing
            products = self.product_repo.get_many(session, product_ids)
            total = Decimal("0")
            for product_id in product_ids:
                product = products.get(product_id)
                if product is None:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Product not found: {product_id}",
                    )
                total += Decimal(product.price) * lines[product_id]
            total = total.quantize(CENT)

            if abs(total - payload.total_price) > PRICE_TOLERANCE:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=(
                        "Order total does not match current prices "
                        f"(expected {total}, got {payload.total_price})"
                    ),
                )

            # 5) Wallet balance
            pay_by_wallet = payload.payment_method == "WALLET"
            if pay_by_wallet:
                user = self.wallet_repo.lock_user(session, user_id)
                if user is None or user.wallet_balance < total:
                    raise insufficient_balance()

            # 6) Deduct stock
            for product_id in product_ids:
                ok = self.stock_repo.decrement(
                    session, product_id, self.location_id, lines[product_id]
                )
                if not ok:
                    raise insufficient_stock(product_id)

            # 7) Order + items (prices captured now)
            order = self.order_repo.create_order(
                session,
                Order(
                    user_id=user_id,
                    location_id=self.location_id,
                    address_id=address.id,
                    payment_method=payload.payment_method,
                    total_price=total,
                    status="PENDING",
                ),
            )
            items = self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=product_id,
                        quantity=lines[product_id],
                        price=products[product_id].price,
                    )
                    for product_id in product_ids
                ],
            )

            # 8) Wallet debit
            if pay_by_wallet:
                if not self.wallet_repo.debit(session, user_id, total):
                    raise insufficient_balance()
                self.wallet_repo.add_transaction(
                    session,
                    WalletTransaction(
                        user_id=user_id,
                        amount=total,
                        type="DEBIT",
                        description=f"Payment for order {order.id}",
                        order_id=order.id,
                    ),
                )

            # 9) Commit
            order_id = order.id
            session.commit()
        except HTTPException as exc:
            session.rollback()
            logger.info("Checkout rejected for user %s: %s", user_id, exc.detail)
            raise
        except Exception:
            session.rollback()
            logger.exception("Checkout failed for user %s", user_id)
            raise

        logger.info(
            "Order %s placed by %s: %d line(s), total %s, paid by %s",
            order_id,
            user_id,
            len(items),
            total,
            payload.payment_method,
        )
        return self.get_user_order(session, user_id, order_id)

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderWithItemsRead]:
        """
        List orders for the given user, newest first, with items.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return self._build_order_dtos(session, orders)

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return self._build_order_dtos(session, [order])[0]

    def cancel_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Customer cancellation, allowed from PENDING / CONFIRMED only.

        In the same transaction:
          - stock goes back to the order's location
          - wallet-paid orders are refunded with a CREDIT ledger row
        """
        try:
            order = self.order_repo.get_for_update(session, order_id)
            if not order or order.user_id != user_id:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Order not found",
                )

            if order.status not in CUSTOMER_CANCELLABLE_STATUSES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Order cannot be cancelled once it is {order.status}",
                )

            # conditional flip: only one concurrent cancel gets past here
            if not self.order_repo.transition_status(
                session, order.id, CUSTOMER_CANCELLABLE_STATUSES, "CANCELLED"
            ):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Order can no longer be cancelled",
                )

            items = self.order_repo.list_items_for_order(session, order.id)
            for item in sorted(items, key=lambda it: it.product_id):
                self.stock_repo.increment(
                    session, item.product_id, order.location_id, item.quantity
                )

            if order.payment_method == "WALLET":
                self.wallet_repo.credit(session, user_id, order.total_price)
                self.wallet_repo.add_transaction(
                    session,
                    WalletTransaction(
                        user_id=user_id,
                        amount=order.total_price,
                        type="CREDIT",
                        description=f"Refund for cancelled order {order.id}",
                        order_id=order.id,
                    ),
                )
                logger.info("Refunded %s to %s for order %s", order.total_price, user_id, order.id)

            session.commit()
        except Exception:
            session.rollback()
            raise

        return self.get_user_order(session, user_id, order_id)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[AdminOrderRead]:
        """
        List all orders (admin only).
        """
        orders = self.order_repo.list_all(session, skip, limit)
        return self._build_admin_dtos(session, orders)

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> AdminOrderRead:
        """
        Get any order with items and customer details (admin only).
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return self._build_admin_dtos(session, [order])[0]

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> AdminOrderRead:
        """
        Admin-only status update.

        Admins move orders freely among PENDING, CONFIRMED and PACKING.
        Once a driver has accepted the order, or it is DELIVERED /
        CANCELLED, the admin can no longer change it.
        """
        new = payload.status
        if new not in ADMIN_SETTABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Admins cannot set status {new}",
            )

        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        driver_managed = self.delivery_repo.get_for_order(session, order.id) is not None
        if order.status not in ADMIN_SETTABLE_STATUSES or driver_managed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order status can no longer be changed ({order.status})",
            )

        if order.status != new:
            if not self.order_repo.transition_status(
                session, order.id, ADMIN_SETTABLE_STATUSES, new
            ):
                session.rollback()
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Order status can no longer be changed",
                )
            logger.info("Order %s moved from %s to %s", order.id, order.status, new)
            session.commit()

        return self.get_order_admin(session, order_id)

    # -------- Helpers --------

    @staticmethod
    def _merge_lines(cart_items: list[CartLine]) -> dict[uuid.UUID, int]:
        """
        Collapse the cart into {product_id: quantity}; repeated products
        are summed.
        """
        lines: dict[uuid.UUID, int] = {}
        for line in cart_items:
            lines[line.id] = lines.get(line.id, 0) + line.quantity
        return lines

    def _build_order_dtos(
        self,
        session: Session,
        orders: list[Order],
    ) -> list[OrderWithItemsRead]:
        """
        Compose OrderWithItemsRead from ORM models, loading all items in
        one query.
        """
        rows = self.order_repo.list_items_for_orders(session, [o.id for o in orders])
        items_by_order: dict[uuid.UUID, list[OrderItemRead]] = {o.id: [] for o in orders}
        for it, product_name, product_sku in rows:
            items_by_order[it.order_id].append(
                OrderItemRead(
                    id=it.id,
                    order_id=it.order_id,
                    product_id=it.product_id,
                    product_name=product_name,
                    product_sku=product_sku,
                    quantity=it.quantity,
                    price=it.price,
                    line_total=Decimal(it.price) * it.quantity,
                )
            )

        return [
            OrderWithItemsRead(
                id=o.id,
                user_id=o.user_id,
                location_id=o.location_id,
                address_id=o.address_id,
                payment_method=o.payment_method,
                status=o.status,
                total_price=o.total_price,
                created_at=o.created_at,
                items=items_by_order[o.id],
            )
            for o in orders
        ]

    def _build_admin_dtos(
        self,
        session: Session,
        orders: list[Order],
    ) -> list[AdminOrderRead]:
        customers = {}
        result: list[AdminOrderRead] = []
        for dto in self._build_order_dtos(session, orders):
            if dto.user_id not in customers:
                customers[dto.user_id] = self.user_repo.get_by_id(session, dto.user_id)
            customer = customers[dto.user_id]
            result.append(
                AdminOrderRead(
                    **dto.model_dump(),
                    customer_name=customer.name if customer else None,
                    customer_email=customer.email if customer else None,
                )
            )
        return result
