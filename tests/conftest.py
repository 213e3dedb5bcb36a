import os

# Settings are read at import time; point them at test values first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("XENDIT_SECRET_KEY", "xnd_development_test")
os.environ.setdefault("BASE_URL", "http://shop.example.com")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

from techpedia.core.payment_gateway import get_gateway
from techpedia.core.security import create_access_token, hash_password
from techpedia.database import get_session
from techpedia.main import app
from techpedia.models.cart import CartItem
from techpedia.models.product import Brand, Category, Product
from techpedia.models.user import ADMIN, CUSTOMER, User

from tests.fakes import FakeGateway

API = "/api/v1"
PASSWORD = "secret-pass"


@pytest.fixture()
def engine(tmp_path):
    # file-backed so separate sessions see each other's commits
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def client(engine, gateway):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- factories ----


def make_user(session, email, role=CUSTOMER, name="Test User", password=PASSWORD):
    user = User(
        name=name,
        email=email,
        password=hash_password(password, rounds=4),
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def customer(session):
    return make_user(session, "alice@example.com", name="Alice")


@pytest.fixture()
def other_customer(session):
    return make_user(session, "bob@example.com", name="Bob")


@pytest.fixture()
def admin(session):
    return make_user(session, "admin@example.com", role=ADMIN, name="Admin")


@pytest.fixture()
def brand(session):
    brand = Brand(name="Acme")
    session.add(brand)
    session.commit()
    session.refresh(brand)
    return brand


@pytest.fixture()
def category(session):
    category = Category(name="Laptops")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture()
def make_product(session, brand, category):
    def _make(name="Widget", price="10.00", stock=10, description="A product"):
        product = Product(
            name=name,
            description=description,
            price=Decimal(price),
            stock=stock,
            brand_id=brand.id,
            category_id=category.id,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture()
def put_in_cart(session):
    def _put(user, product, quantity):
        item = CartItem(user_id=user.id, product_id=product.id, quantity=quantity)
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    return _put
