# tests/test_concurrency.py
import threading
import uuid
from decimal import Decimal

import pytest
from fastapi import HTTPException
from sqlmodel import Session, SQLModel, create_engine, select

from conftest import LOCATION_ID, build_order_service
from storefront.models.address import Address
from storefront.models.inventory import Location, StockItem
from storefront.models.order import Order
from storefront.models.product import Category, Product
from storefront.models.user import User
from storefront.models.wallet import WalletTransaction
from storefront.repositories.delivery_repo import DeliveryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.stock_repo import StockRepository
from storefront.repositories.user_repo import UserRepository
from storefront.repositories.wallet_repo import WalletRepository
from storefront.schemas.order import OrderCreate
from storefront.services.order_service import OrderService


@pytest.fixture
def file_engine(tmp_path):
    # file-backed so each thread gets its own connection
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


def seed(engine, stock: int, shoppers: int, balance: str = "0"):
    """Store, one product, and `shoppers` customers each with an address."""
    with Session(engine) as session:
        session.add(Location(id=LOCATION_ID, name="Race Store"))
        category = Category(name="Bakery")
        session.add(category)
        session.flush()
        loaf = Product(sku="LOAF-1", name="Loaf", price=Decimal("3.00"), category_id=category.id)
        session.add(loaf)
        session.flush()
        session.add(StockItem(product_id=loaf.id, location_id=LOCATION_ID, quantity=stock))

        people = []
        for n in range(shoppers):
            user = User(
                id=uuid.uuid4(),
                email=f"shopper{n}@example.com",
                name=f"Shopper {n}",
                wallet_balance=Decimal(balance),
            )
            session.add(user)
            session.flush()
            if user.wallet_balance > 0:
                session.add(
                    WalletTransaction(
                        user_id=user.id,
                        amount=user.wallet_balance,
                        type="CREDIT",
                        description="Opening balance",
                    )
                )
            address = Address(user_id=user.id, street=f"{n} Oven Rd", city="Pune", zip="411001")
            session.add(address)
            session.flush()
            people.append((user.id, address.id))
        product_id = loaf.id
        session.commit()
    return product_id, people


def run_threads(target, args_list) -> list[str]:
    outcomes: list[str] = []
    lock = threading.Lock()

    def worker(*args):
        try:
            target(*args)
            result = "ok"
        except HTTPException as exc:
            result = exc.detail
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=args) for args in args_list]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


def checkout_payload(product_id, address_id, payment_method="CASH") -> OrderCreate:
    return OrderCreate.model_validate(
        {
            "cartItems": [{"id": str(product_id), "quantity": 1}],
            "totalPrice": "3.00",
            "addressId": str(address_id),
            "paymentMethod": payment_method,
        }
    )


def test_concurrent_checkouts_cannot_oversell(file_engine):
    product_id, shoppers = seed(file_engine, stock=1, shoppers=2)
    service = build_order_service()
    barrier = threading.Barrier(len(shoppers))

    def checkout(user_id, address_id):
        payload = checkout_payload(product_id, address_id)
        barrier.wait()
        with Session(file_engine) as session:
            service.create_order(session, user_id, payload)

    outcomes = run_threads(checkout, shoppers)

    assert sorted(outcomes) == sorted(
        ["ok", f"Not enough stock for product ID: {product_id}"]
    )

    with Session(file_engine) as session:
        stock = session.get(StockItem, (product_id, LOCATION_ID))
        assert stock.quantity == 0
        assert len(session.exec(select(Order)).all()) == 1


class GatedOrderRepository(OrderRepository):
    """Holds every caller at a barrier right before the status flip."""

    def __init__(self, barrier: threading.Barrier):
        self.barrier = barrier

    def transition_status(self, session, order_id, from_statuses, to_status):
        self.barrier.wait(timeout=10)
        return super().transition_status(session, order_id, from_statuses, to_status)


def test_concurrent_cancels_refund_and_restock_once(file_engine):
    product_id, [(user_id, address_id)] = seed(
        file_engine, stock=6, shoppers=1, balance="10.00"
    )
    with Session(file_engine) as session:
        order = build_order_service().create_order(
            session, user_id, checkout_payload(product_id, address_id, "WALLET")
        )
    # balance 7.00, stock 5

    barrier = threading.Barrier(2)
    service = OrderService(
        order_repo=GatedOrderRepository(barrier),
        product_repo=ProductRepository(),
        stock_repo=StockRepository(),
        wallet_repo=WalletRepository(),
        user_repo=UserRepository(),
        delivery_repo=DeliveryRepository(),
        location_id=LOCATION_ID,
    )

    def cancel():
        with Session(file_engine) as session:
            service.cancel_order(session, user_id, order.id)

    outcomes = run_threads(cancel, [(), ()])

    assert sorted(outcomes) == ["Order can no longer be cancelled", "ok"]

    with Session(file_engine) as session:
        assert session.get(User, user_id).wallet_balance == Decimal("10.00")
        assert session.get(StockItem, (product_id, LOCATION_ID)).quantity == 6
        refunds = session.exec(
            select(WalletTransaction).where(
                WalletTransaction.order_id == order.id,
                WalletTransaction.type == "CREDIT",
            )
        ).all()
        assert len(refunds) == 1
        assert session.get(Order, order.id).status == "CANCELLED"
