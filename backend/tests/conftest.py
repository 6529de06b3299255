"""
Pytest fixtures for the store ledger backend.

Each test gets a fresh in-memory SQLite schema, a session bound to it and a
FastAPI TestClient whose get_db dependency yields that same session.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storeledger.models  # noqa: F401
from storeledger.core.celery_app import celery_app
from storeledger.deps import get_db
from storeledger.main import app as fastapi_app
from storeledger.models.base import Base
from storeledger.models.catalog import Product
from storeledger.models.party import Customer, Retailer
from storeledger.models.store import Store, Warehouse
from storeledger.services import stock_service

celery_app.conf.task_always_eager = True


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    session = TestingSession()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db):
    def _override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def store(db):
    store = Store(name="Main Branch", location="Lahore")
    db.add(store)
    db.commit()
    return store


@pytest.fixture
def other_store(db):
    store = Store(name="Second Branch", location="Karachi")
    db.add(store)
    db.commit()
    return store


@pytest.fixture
def headers(store):
    return {"X-Store-Id": str(store.store_id)}


@pytest.fixture
def warehouses(db):
    """Two warehouses: W1 created first (the default), W2 second."""
    w1 = Warehouse(name="W1", printer_enabled=False)
    w2 = Warehouse(name="W2", printer_enabled=False)
    db.add_all([w1, w2])
    db.commit()
    return w1, w2


def make_product(db, store, barcode="1001", name="Rice 5kg", cost="80.00", price="100.00"):
    product = Product(
        store_id=store.store_id,
        name=name,
        barcode=barcode,
        cost_price=Decimal(cost),
        sale_price=Decimal(price),
        discount=Decimal("0"),
        total_stock=0,
    )
    db.add(product)
    db.flush()
    return product


def stock(db, product, *quantities_by_warehouse):
    """stock(db, product, (w1, 7), (w2, 3)) books opening quantities and commits."""
    for warehouse, quantity in quantities_by_warehouse:
        stock_service.apply_inventory_delta(db, product.product_id, warehouse.warehouse_id, quantity)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def product(db, store, warehouses):
    """Product stocked W1=7, W2=3 (total 10)."""
    w1, w2 = warehouses
    item = make_product(db, store)
    return stock(db, item, (w1, 7), (w2, 3))


@pytest.fixture
def customer(db, store):
    customer = Customer(store_id=store.store_id, name="Ali Raza", phone="03001234567", balance=Decimal("0"))
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def retailer(db, store):
    retailer = Retailer(store_id=store.store_id, name="City Traders", contact="03111234567")
    db.add(retailer)
    db.commit()
    return retailer
