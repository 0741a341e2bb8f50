# tests/conftest.py
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["FULFILLMENT_LOCATION_ID"] = "test-store"

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.main import app
from storefront.models.address import Address
from storefront.models.inventory import Location, StockItem
from storefront.models.product import Category, Product
from storefront.models.user import User
from storefront.models.wallet import WalletTransaction
from storefront.repositories.delivery_repo import DeliveryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.stock_repo import StockRepository
from storefront.repositories.user_repo import UserRepository
from storefront.repositories.wallet_repo import WalletRepository
from storefront.services.order_service import OrderService
from storefront.services.wallet_service import WalletService

settings = get_settings()
LOCATION_ID = settings.FULFILLMENT_LOCATION_ID


def build_order_service(location_id: str = LOCATION_ID) -> OrderService:
    return OrderService(
        order_repo=OrderRepository(),
        product_repo=ProductRepository(),
        stock_repo=StockRepository(),
        wallet_repo=WalletRepository(),
        user_repo=UserRepository(),
        delivery_repo=DeliveryRepository(),
        location_id=location_id,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        session.add(Location(id=LOCATION_ID, name="Test Dark Store"))
        session.commit()
        yield session


@pytest.fixture
def client(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def order_service():
    return build_order_service()


@pytest.fixture
def wallet_service():
    return WalletService(WalletRepository())


# -------- Factories --------


@pytest.fixture
def make_user(session):
    def _make_user(
        role: str = "CUSTOMER",
        balance: Decimal | str = "0",
        email: str | None = None,
    ) -> User:
        user_id = uuid.uuid4()
        balance = Decimal(balance)
        user = User(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            name="Test User",
            role=role,
            wallet_balance=balance,
        )
        session.add(user)
        if balance > 0:
            # keep balance == ledger sum
            session.add(
                WalletTransaction(
                    user_id=user_id,
                    amount=balance,
                    type="CREDIT",
                    description="Opening balance",
                )
            )
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def category(session):
    category = Category(name="Dairy")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def make_product(session, category):
    counter = {"n": 0}

    def _make_product(
        price: Decimal | str = "1.00",
        stock: int | None = 10,
        name: str | None = None,
    ) -> Product:
        counter["n"] += 1
        product = Product(
            sku=f"SKU-{counter['n']:04d}",
            name=name or f"Product {counter['n']}",
            price=Decimal(price),
            category_id=category.id,
        )
        session.add(product)
        session.flush()
        if stock is not None:
            session.add(
                StockItem(
                    product_id=product.id,
                    location_id=LOCATION_ID,
                    quantity=stock,
                )
            )
        session.commit()
        session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def make_address(session):
    def _make_address(user: User) -> Address:
        address = Address(user_id=user.id, street="1 Main St", city="Pune", zip="411001")
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    return _make_address


def stock_of(session: Session, product: Product) -> int:
    session.expire_all()
    item = session.get(StockItem, (product.id, LOCATION_ID))
    return item.quantity if item else 0


def auth_headers(user: User) -> dict[str, str]:
    token = jwt.encode(
        {
            "sub": str(user.id),
            "email": user.email,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALG,
    )
    return {"Authorization": f"Bearer {token}"}
