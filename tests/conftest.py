import os

# Settings are read once on first import, so the environment must be in
# place before anything from `app` is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("ENVIRONMENT", "test")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.security import create_access_token, hash_password
from app.database import get_session
from app.main import app
from app.models.product import Inventory, Product, Shop
from app.models.user import User, UserAddress

API = "/api"
PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


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
        yield session


@pytest.fixture
def client(session):
    def _get_session_override():
        yield session

    app.dependency_overrides[get_session] = _get_session_override
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()


# ---- seed factories ----


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(
        email: str | None = None,
        role: str = "customer",
        name: str = "Test User",
        phone_number: str | None = "9000000000",
        is_deleted: bool = False,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            phone_number=phone_number,
            password_hash=PASSWORD_HASH,
            role=role,
            is_deleted=is_deleted,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_shop(session, make_user):
    def _make(owner: User | None = None, name: str = "Corner Store") -> Shop:
        owner = owner or make_user(role="shopkeeper", name="Owner")
        shop = Shop(owner_id=owner.user_id, name=name, image_url="https://img/shop.png")
        session.add(shop)
        session.commit()
        session.refresh(shop)
        return shop

    return _make


@pytest.fixture
def make_product(session):
    def _make(
        name: str = "Rice 1kg",
        base_price: str | None = "60.00",
        is_deleted: bool = False,
    ) -> Product:
        product = Product(
            name=name,
            base_price=Decimal(base_price) if base_price is not None else None,
            image_url=f"https://img/{name.replace(' ', '-').lower()}.png",
            is_deleted=is_deleted,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_inventory(session):
    def _make(
        shop: Shop,
        product: Product,
        stock: int = 10,
        selling_price: str | None = "50.00",
        is_deleted: bool = False,
    ) -> Inventory:
        row = Inventory(
            shop_id=shop.shop_id,
            product_id=product.product_id,
            stock_quantity=stock,
            selling_price=Decimal(selling_price) if selling_price is not None else None,
            is_deleted=is_deleted,
        )
        session.add(row)
        session.commit()
        session.refresh(row)
        return row

    return _make


@pytest.fixture
def make_address(session):
    def _make(user: User, is_default: bool = True, city: str = "Pune") -> UserAddress:
        address = UserAddress(
            user_id=user.user_id,
            full_name="Asha Rao",
            phone="9811111111",
            house="12 Lake View",
            landmark="Near park",
            city=city,
            state="MH",
            pincode="411001",
            is_default=is_default,
        )
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    return _make


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.user_id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}
