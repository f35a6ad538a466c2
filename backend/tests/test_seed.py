import importlib.util
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from storefront.config import get_settings
from storefront.main import build_storage, create_app
from storefront.repositories.sql import SqlStorage
from storefront.schemas.catalog import ProductFilter
from storefront.seed import CATEGORIES, PRODUCTS, seed_catalog


def test_seed_catalog(storage):
    created = seed_catalog(storage)
    assert created == len(PRODUCTS)
    assert len(storage.list_categories()) == len(CATEGORIES)

    products = storage.list_products()
    assert len(products) == len(PRODUCTS)
    assert all(p.category is not None for p in products)


def test_seed_is_idempotent(storage):
    seed_catalog(storage)
    assert seed_catalog(storage) == 0
    assert len(storage.list_products()) == len(PRODUCTS)


def test_seeded_catalog_filters_by_category(storage):
    seed_catalog(storage)
    clothing = next(c for c in storage.list_categories() if c.slug == "clothing")
    found = storage.list_products(ProductFilter(category_id=clothing.id))
    assert {p.name for p in found} == {"Premium Casual T-Shirt", "Classic Jeans"}


def test_custom_catalog(storage):
    created = seed_catalog(
        storage,
        [{"name": "Books", "slug": "books"}],
        [{"name": "Novel", "price": "12.50", "category": "books", "stock_quantity": 0}],
    )
    assert created == 1
    novel = storage.list_products()[0]
    assert novel.category.slug == "books"
    assert novel.in_stock is False


def test_startup_seeding(storage):
    settings = get_settings(STORAGE_BACKEND="memory", SEED_ON_STARTUP=True)
    with TestClient(create_app(settings=settings, storage=storage)) as c:
        assert len(c.get("/api/products").json()) == len(PRODUCTS)
        assert len(c.get("/api/categories").json()) == len(CATEGORIES)


def test_build_storage_sql(tmp_path):
    url = f"sqlite:///{tmp_path / 'shop.db'}"
    storage = build_storage(get_settings(STORAGE_BACKEND="sql", DATABASE_URL=url))
    assert isinstance(storage, SqlStorage)
    assert storage.ping()
    seed_catalog(storage)
    # survives a second process start against the same file
    again = build_storage(get_settings(STORAGE_BACKEND="sql", DATABASE_URL=url))
    assert len(again.list_categories()) == len(CATEGORIES)


def test_seed_script_loads_json(tmp_path):
    script = Path(__file__).resolve().parents[1] / "scripts" / "seed_products.py"
    mod_spec = importlib.util.spec_from_file_location("seed_products", script)
    module = importlib.util.module_from_spec(mod_spec)
    mod_spec.loader.exec_module(module)

    catalog = tmp_path / "catalog.json"
    catalog.write_text(
        json.dumps(
            {
                "categories": [{"name": "Toys", "slug": "toys"}],
                "products": [{"name": "Kite", "price": "15.00", "category": "toys"}],
            }
        )
    )
    url = f"sqlite:///{tmp_path / 'seeded.db'}"
    assert module.main(["--file", str(catalog), "--database-url", url]) == 0

    storage = build_storage(get_settings(STORAGE_BACKEND="sql", DATABASE_URL=url))
    assert [p.name for p in storage.list_products()] == ["Kite"]


def test_unknown_category_slug_is_rejected(storage):
    with pytest.raises(ValueError, match="toys"):
        seed_catalog(
            storage,
            [{"name": "Books", "slug": "books"}],
            [{"name": "Kite", "price": "15.00", "category": "toys"}],
        )
    assert storage.list_categories() == []
    assert storage.list_products() == []
