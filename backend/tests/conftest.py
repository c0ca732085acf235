import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth_utils import hash_password
from database import Base, get_db
from jwt_utils import create_owner_token
from main import app
from models import Admin, Product, User

# Jedno sdílené in-memory SQLite spojení pro testy i aplikaci
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db_session):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "url": f"https://shop.example.com/product/{n}",
            "name": f"Product {n}",
            "price": 100.0,
            "stock_status": "In Stock",
            "brand": "Acme",
            "model": f"M-{n}",
            "warranty": "2 years",
            "category": "laptops",
            "subcategory": "gaming",
            "images": [f"https://cdn.example.com/{n}.jpg"],
            "shop": "Example Shop",
            "features": {"ram": "16GB"},
        }
        data.update(overrides)
        product = Product(**data)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


def _make_account(db_session, model, username: str, password: str = "secret123"):
    account = model(
        first_name="Test",
        last_name="Account",
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(password),
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def make_account(db_session):
    def _make(model, username: str, password: str = "secret123"):
        return _make_account(db_session, model, username, password)

    return _make


@pytest.fixture
def user(db_session):
    return _make_account(db_session, User, "alice")


@pytest.fixture
def admin(db_session):
    return _make_account(db_session, Admin, "root")


@pytest.fixture
def user_headers(user):
    return {"Authorization": f"Bearer {create_owner_token(user)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_owner_token(admin)}"}
