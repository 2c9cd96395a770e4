import os

# Must be set before config/database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("GUEST_CART_PATH", None)
os.environ.pop("GUEST_WISHLIST_PATH", None)

import pytest
from fastapi.testclient import TestClient

from database import Base, engine, SessionLocal
from main import app
from models.product import Product
from models.users import User
from schemas.cart import CartProduct
from store.notifications import Notifier
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token


class RecordingNotifier(Notifier):
    def __init__(self):
        self.notifications = []

    def emit(self, notification):
        self.notifications.append(notification)

    @property
    def messages(self):
        return [(n.level, n.message) for n in self.notifications]


def snapshot(product_id, price=10.0, stock=10, name=None):
    return CartProduct(id=product_id, name=name or product_id.upper(), price=price, stock=stock)


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def products(db):
    rows = [
        Product(id="p1", name="Classic Tee", category="Apparel", price=10.0, stock=10),
        Product(id="p2", name="Enamel Mug", category="Home", price=2.5, original_price=3.0, stock=5),
        Product(id="p3", name="Last Cap", category="Accessories", price=7.0, stock=1),
    ]
    db.add_all(rows)
    db.commit()
    return {p.id: p for p in rows}


def _make_user(db, email):
    user = User(email=email, password_hash=get_password_hash("secret123"), role="customer")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def customer(db):
    return _make_user(db, "anna@storefront.io")


@pytest.fixture
def other_customer(db):
    return _make_user(db, "bart@storefront.io")


@pytest.fixture
def token(customer):
    return create_access_token({"sub": customer.email, "role": customer.role})


@pytest.fixture
def other_token(other_customer):
    return create_access_token({"sub": other_customer.email, "role": other_customer.role})


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_snapshot():
    return snapshot
