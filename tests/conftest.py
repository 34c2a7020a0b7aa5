"""Shared fixtures: one SQLite file per source database, seeded through the ORM.

Report queries run on worker threads, so each source gets a file-backed
engine (one connection per thread) rather than a shared in-memory one.
"""

import os

for _var in ("CUSTOMER_DATABASE_URL", "ADMIN_DATABASE_URL", "IMS_DATABASE_URL", "MACHINE_DATABASE_URL"):
    os.environ.setdefault(_var, "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db.models import (
    AdminBase, CustomerBase, ImsBase, MachineBase,
    City, Location, Product, Variant,
    User, Order, OrderItem,
    LocationInventory, LocationInventoryLog,
    Scale,
)
from app.main import app
from app.repositories.catalog import CatalogRepository
from app.repositories.ledger import LedgerRepository
from app.repositories.orders import OrdersRepository
from app.repositories.sensors import SensorRepository
from app.services.sources import Repositories, get_repositories


def _factory(tmp_path, name, base):
    engine = create_engine(f"sqlite:///{tmp_path / name}.db")
    base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _seed(factory, objects):
    db = factory()
    try:
        db.add_all(objects)
        db.commit()
    finally:
        db.close()


def log(inv_id, kind, qty, price, when):
    return LocationInventoryLog(
        location_inventory_id=inv_id, type=kind, qty=qty, price_with_tax=price,
        created_at=datetime.fromisoformat(when),
    )


@pytest.fixture
def sources(tmp_path):
    admin = _factory(tmp_path, "admin", AdminBase)
    customer = _factory(tmp_path, "customer", CustomerBase)
    ims = _factory(tmp_path, "ims", ImsBase)
    machine = _factory(tmp_path, "machine", MachineBase)

    _seed(admin, [
        City(id=1, name="Bengaluru"),
        City(id=2, name="Mumbai"),
        Product(id=100, name="Tomato"),
        Product(id=101, name="Onion"),
    ])
    _seed(admin, [
        Location(id=10, display_name="Whitefield Store", city_id=1),
        Location(id=11, display_name="Andheri Warehouse", city_id=2),
        Variant(id=1000, title="Tomato 1kg", product_id=100, unit_weight=0.8),
        Variant(id=1001, title="Onion 500g", product_id=101, unit_weight=0.5),
        Variant(id=1002, title="Loose Garlic", product_id=101, unit_weight=None),
    ])

    _seed(customer, [
        User(id=1, name="Asha", phone_number="9000000001"),
        User(id=2, name="bharat", phone_number="9000000002"),
        Order(id=1, user_id=1, location_id=10, status="paid", order_at=datetime(2024, 3, 1, 10), total_amount=200),
        Order(id=2, user_id=2, location_id=10, status="paid", order_at=datetime(2024, 3, 1, 18), total_amount=100),
        Order(id=3, user_id=1, location_id=11, status="paid", order_at=datetime(2024, 3, 2, 9), total_amount=50),
        Order(id=4, user_id=1, location_id=10, status="cancelled", order_at=datetime(2024, 3, 1, 12), total_amount=999),
        Order(id=5, user_id=99, location_id=10, status="paid", order_at=datetime(2024, 3, 3, 11), total_amount=30),
    ])
    _seed(customer, [
        OrderItem(id=1, order_id=1, variant_id=1000, qty=2, selling_price=50),
        OrderItem(id=2, order_id=1, variant_id=1001, qty=4, selling_price=25),
        OrderItem(id=3, order_id=2, variant_id=1000, qty=1, selling_price=100),
        OrderItem(id=4, order_id=3, variant_id=1001, qty=2, selling_price=25),
        OrderItem(id=5, order_id=4, variant_id=1000, qty=10, selling_price=99.9),
        OrderItem(id=6, order_id=5, variant_id=1002, qty=1, selling_price=30),
    ])

    _seed(ims, [
        LocationInventory(id=1, location_id=10, variant_id=1000, qty=120),
        LocationInventory(id=2, location_id=10, variant_id=1001, qty=40),
        LocationInventory(id=3, location_id=11, variant_id=1001, qty=10),
        LocationInventory(id=4, location_id=99, variant_id=1002, qty=5),
    ])
    _seed(ims, [
        log(1, "inward", 100, 1000, "2024-02-28 09:00:00"),
        log(1, "outward", 10, 100, "2024-02-29 09:00:00"),
        log(1, "inward", 50, 500, "2024-03-01 08:00:00"),
        log(1, "outward", 20, 200, "2024-03-01 17:00:00"),
        log(1, "intransit", 5, 50, "2024-03-01 19:00:00"),
        log(1, "default", 2, 20, "2024-03-02 10:00:00"),
        log(2, "inward", 40, 400, "2024-03-01 08:30:00"),
        log(3, "default", 10, 100, "2024-02-01 08:00:00"),
        log(3, "outward", 1, 10, "2024-03-02 12:00:00"),
    ])

    _seed(machine, [
        Scale(id=1, variant_id=1000, current_weight=90, updated_at=datetime(2024, 3, 1, 8)),
        Scale(id=2, variant_id=1000, current_weight=96, updated_at=datetime(2024, 3, 2, 8)),
        Scale(id=3, variant_id=1001, current_weight=20, updated_at=datetime(2024, 3, 2, 8)),
        Scale(id=4, variant_id=1002, current_weight=10, updated_at=datetime(2024, 3, 2, 8)),
    ])

    return {"admin": admin, "customer": customer, "ims": ims, "machine": machine}


@pytest.fixture
def repos(sources):
    return Repositories(
        catalog=CatalogRepository(sources["admin"]),
        orders=OrdersRepository(sources["customer"]),
        ledger=LedgerRepository(sources["ims"]),
        sensors=SensorRepository(sources["machine"]),
        timeout=5.0,
    )


@pytest.fixture
def client(repos):
    app.dependency_overrides[get_repositories] = lambda: repos
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
