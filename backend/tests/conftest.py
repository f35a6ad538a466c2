from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.config import get_settings
from storefront.db import init_db, make_engine
from storefront.main import create_app
from storefront.repositories.memory import MemoryStorage
from storefront.repositories.sql import SqlStorage
from storefront.schemas.catalog import CategoryIn, ProductIn


def _make_storage(kind):
    if kind == "memory":
        return MemoryStorage()
    engine = make_engine("sqlite://")
    init_db(engine)
    return SqlStorage(engine)


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """A fresh, empty store for each backend."""
    return _make_storage(request.param)


@pytest.fixture
def settings():
    return get_settings(STORAGE_BACKEND="memory", SEED_ON_STARTUP=False)


@pytest.fixture
def client(storage, settings):
    app = create_app(settings=settings, storage=storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_category(storage):
    def _make(name="Electronics", slug=None):
        return storage.create_category(
            CategoryIn(name=name, slug=slug or name.lower(), description=name)
        )

    return _make


@pytest.fixture
def make_product(storage):
    def _make(name="Test Coffee", price="4.99", **fields):
        fields.setdefault("stock_quantity", 10)
        return storage.create_product(
            ProductIn(name=name, price=Decimal(price), **fields)
        )

    return _make
