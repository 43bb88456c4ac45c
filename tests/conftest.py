"""
Shared fixtures: an in-memory SQLite database and a dict-backed Redis.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import fnmatch
from datetime import datetime

import pytest
import pytest_asyncio

from duka.core.database import Base, engine, get_db_context, init_db
from duka.core.redis_client import cache_manager, session_manager
from duka.models.sales import Sale
from duka.services.inventory_monitor import InventoryMonitor
from duka.services.shop_accounts import ShopAccounts


class FakeRedis:
    """The subset of the redis client the cache and session managers use."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def get(self, key):
        return self.store.get(key)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if isinstance(key, bytes):
                key = key.decode()
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def expire(self, key, ttl):
        if key not in self.store:
            return False
        self.ttls[key] = ttl
        return True

    def scan_iter(self, match="*"):
        return [key for key in list(self.store) if fnmatch.fnmatch(key, match)]

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache_manager, "client", fake)
    monkeypatch.setattr(session_manager, "client", fake)
    return fake


@pytest.fixture(autouse=True)
def database():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def accounts():
    return ShopAccounts()


@pytest.fixture
def inventory():
    return InventoryMonitor()


@pytest_asyncio.fixture
async def owner(accounts):
    """Session membership of a freshly registered shop owner."""
    result = await accounts.sign_up("amina@duka.test", "secret123", "Amina Otieno", "Amina's Kiosk")
    return {"user_id": result["user"]["id"], "shop_id": result["shop"]["id"], "role": "owner"}


@pytest_asyncio.fixture
async def attendant(accounts, owner):
    employee = await accounts.create_employee(owner, "brian@duka.test", "secret123", "Brian Kip")
    return {"user_id": employee["user_id"], "shop_id": owner["shop_id"], "role": "attendant"}


@pytest_asyncio.fixture
async def other_owner(accounts):
    result = await accounts.sign_up("juma@duka.test", "secret123", "Juma Hassan")
    return {"user_id": result["user"]["id"], "shop_id": result["shop"]["id"], "role": "owner"}


@pytest_asyncio.fixture
async def unga(inventory, owner):
    return await inventory.add_product(owner, {
        "name": "Unga 2kg",
        "selling_price": 180,
        "cost_price": 150,
        "quantity": 20,
        "low_stock_threshold": 5,
        "category": "Food"
    })


@pytest_asyncio.fixture
async def soda(inventory, owner):
    return await inventory.add_product(owner, {
        "name": "Soda 500ml",
        "selling_price": 60,
        "cost_price": 45,
        "quantity": 3,
        "low_stock_threshold": 5
    })


@pytest.fixture
def backdate():
    """Move a sale to a naive UTC timestamp."""
    def _backdate(sale_id: int, when: datetime) -> None:
        with get_db_context() as db:
            db.query(Sale).filter(Sale.id == sale_id).update({"created_at": when})
            db.commit()
    return _backdate
