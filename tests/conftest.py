import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from storefront.core.auth import create_access_token
from storefront.database import build_engine, create_db_and_tables, get_session
from storefront.main import app
from storefront.models.discount import Discount
from storefront.models.product import Product
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.discount_repo import DiscountRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartItemCreate
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.discount_service import DiscountEvaluator


@pytest.fixture()
def engine(tmp_path):
    # File-backed so separate sessions (and threads) see each other's commits
    engine = build_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def discounts():
    return DiscountEvaluator(DiscountRepository())


@pytest.fixture()
def cart_service(discounts):
    return CartService(CartRepository(), ProductRepository(), discounts)


@pytest.fixture()
def checkout_service(discounts):
    return CheckoutService(
        ProductRepository(),
        CartRepository(),
        OrderRepository(),
        discounts,
        enforce_price_check=True,
    )


@pytest.fixture()
def make_user(session):
    def _make(email: str | None = None) -> User:
        user_id = uuid.uuid4()
        user = User(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            name="Buyer",
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_product(session):
    def _make(
        name: str = "Widget",
        price: str = "10.00",
        stock: int = 5,
        is_active: bool = True,
    ) -> Product:
        return ProductRepository().create(
            session,
            Product(
                name=name,
                price=Decimal(price),
                stock=stock,
                is_active=is_active,
                category="other",
            ),
        )

    return _make


@pytest.fixture()
def make_discount(session):
    def _make(
        code: str = "SAVE10",
        discount_type: str = "percentage",
        amount: str = "10",
        expires_in: timedelta = timedelta(days=7),
        is_active: bool = True,
    ) -> Discount:
        return DiscountRepository().create(
            session,
            Discount(
                code=code,
                discount_type=discount_type,
                amount=Decimal(amount),
                expires_at=datetime.now(timezone.utc) + expires_in,
                is_active=is_active,
            ),
        )

    return _make


@pytest.fixture()
def add_to_cart(session, cart_service):
    def _add(user: User, product: Product, quantity: int):
        return cart_service.add_to_cart(
            session,
            user.id,
            CartItemCreate(product_id=product.id, quantity=quantity),
        )

    return _add


@pytest.fixture()
def address():
    return {
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "US",
    }


@pytest.fixture()
def client(engine):
    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def _headers(user_id: uuid.UUID | None = None, email: str = "buyer@example.com"):
        token = create_access_token(user_id or uuid.uuid4(), email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
