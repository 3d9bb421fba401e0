"""
Pytest fixtures for the StockLab API test suite.

Every test runs against its own file-backed SQLite database under tmp_path,
so threads in the concurrency tests get real separate connections.

Sessions used directly by tests are kept short (open, act, close): SQLite
takes its write lock at BEGIN, and a session left open would block the
requests made through the test client.
"""

import os

# Settings are read at import time; pin them before the app is imported
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "2880"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_FILE"] = ""
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from config import settings
from database import Database
from main import create_app
from models.product import Product
from models.stock import Stock, Transaction
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'stocklab_test.db'}", timeout=10)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def app(database):
    return create_app(settings, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


# -----------------------------------------------------------------------------
# Data helpers
# -----------------------------------------------------------------------------

def create_user(database, email="admin@stocklab.co.id", password=DEFAULT_PASSWORD, role="admin", name="Admin"):
    with database.SessionLocal() as s:
        user = User(email=email, password_hash=get_password_hash(password), name=name, role=role)
        s.add(user)
        s.commit()
        return user.id


def create_product(database, quantity=0, name="Mie Sedap Goreng", product_id=None, with_stock=True):
    with database.SessionLocal() as s:
        product = Product(
            id=product_id,
            name=name,
            sku=f"SKU-TEST-{name}-{product_id or ''}",
            brand="Mie Sedap",
            price=Decimal("10000"),
        )
        if with_stock:
            product.stock = Stock(quantity=quantity, updated_at=datetime.utcnow())
        s.add(product)
        s.commit()
        return product.id


def stock_quantity(database, product_id):
    with database.SessionLocal() as s:
        stock = s.get(Stock, product_id)
        return stock.quantity if stock else None


def movement_rows(database, product_id=None):
    with database.SessionLocal() as s:
        query = s.query(Transaction)
        if product_id is not None:
            query = query.filter(Transaction.product_id == product_id)
        return [(t.product_id, t.user_id, t.quantity, t.move_type.value) for t in query.order_by(Transaction.id)]


def bearer(user_id, role="admin"):
    return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}


@pytest.fixture
def admin_id(database):
    return create_user(database)


@pytest.fixture
def staff_id(database):
    return create_user(database, email="staff@stocklab.co.id", role="staff", name="Staff")


@pytest.fixture
def admin_headers(admin_id):
    return bearer(admin_id, "admin")


@pytest.fixture
def staff_headers(staff_id):
    return bearer(staff_id, "staff")
