from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.config import get_settings
from storefront.main import create_app
from storefront.schemas.user import UserIn

NEW_PRODUCT = {
    "name": "Desk Lamp",
    "description": "LED",
    "price": "79.99",
    "stockQuantity": 3,
    "lowStockThreshold": 5,
}


def test_create_and_fetch_product(client, make_category):
    cat = make_category("Home")
    res = client.post("/api/admin/products", json={**NEW_PRODUCT, "categoryId": cat.id})
    assert res.status_code == 201
    created = res.json()
    assert created["price"] == "79.99"
    assert created["isActive"] is True

    fetched = client.get(f"/api/products/{created['id']}").json()
    assert fetched["name"] == "Desk Lamp"


def test_create_product_with_unknown_category(client):
    res = client.post("/api/admin/products", json={**NEW_PRODUCT, "categoryId": 77})
    assert res.status_code == 400


def test_patch_product(client, make_product):
    p = make_product("Tea", "3.00")
    res = client.patch(f"/api/admin/products/{p.id}", json={"price": "3.25", "isOnSale": True})
    assert res.status_code == 200
    body = res.json()
    assert body["price"] == "3.25"
    assert body["isOnSale"] is True
    assert body["name"] == "Tea"


@pytest.mark.parametrize("field", ["name", "price", "stockQuantity", "rating", "isActive"])
def test_patch_rejects_null_for_required_fields(client, make_product, field):
    p = make_product("Tea", "3.00")
    res = client.patch(f"/api/admin/products/{p.id}", json={field: None})
    assert res.status_code == 400

    listed = client.get("/api/products")
    assert listed.status_code == 200
    assert [x["name"] for x in listed.json()] == ["Tea"]


def test_patch_can_clear_optional_fields(client, make_product):
    p = make_product("Tea", "3.00", original_price=Decimal("4.00"), sale_percentage=25)
    res = client.patch(
        f"/api/admin/products/{p.id}",
        json={"originalPrice": None, "salePercentage": None},
    )
    assert res.status_code == 200
    assert res.json()["originalPrice"] is None
    assert client.get(f"/api/products/{p.id}").json()["salePercentage"] is None


def test_soft_delete_via_api(client, make_product):
    p = make_product()
    assert client.delete(f"/api/admin/products/{p.id}").status_code == 200

    assert client.get("/api/products").json() == []
    listed = client.get("/api/admin/products", params={"includeInactive": "true"}).json()
    assert [x["id"] for x in listed] == [p.id]
    assert client.delete("/api/admin/products/999").status_code == 404


def test_stock_update_and_low_stock(client, make_product):
    p = make_product(stock_quantity=40, low_stock_threshold=5)
    res = client.put(f"/api/admin/products/{p.id}/stock", json={"quantity": 0})
    assert res.status_code == 200
    assert res.json()["inStock"] is False

    low = client.get("/api/admin/products/low-stock").json()
    assert [x["id"] for x in low] == [p.id]


def test_create_category_rejects_duplicate_slug(client):
    payload = {"name": "Garden", "slug": "garden"}
    assert client.post("/api/admin/categories", json=payload).status_code == 201
    assert client.post("/api/admin/categories", json=payload).status_code == 409


class TestRoleCheck:
    @pytest.fixture
    def settings(self):
        return get_settings(
            STORAGE_BACKEND="memory", SEED_ON_STARTUP=False, ADMIN_ROLE_CHECK=True
        )

    def test_missing_user_header(self, client):
        assert client.get("/api/admin/products").status_code == 401

    def test_non_admin_forbidden(self, client, storage):
        user = storage.create_user(UserIn(username="shopper"))
        res = client.get("/api/admin/products", headers={"x-user-id": str(user.id)})
        assert res.status_code == 403

    def test_admin_allowed(self, client, storage):
        admin = storage.create_user(UserIn(username="boss", role="admin"))
        res = client.get("/api/admin/products", headers={"x-user-id": str(admin.id)})
        assert res.status_code == 200

    def test_public_routes_unaffected(self, client):
        assert client.get("/api/products").status_code == 200


def test_startup_seeds_admin_user(storage):
    settings = get_settings(STORAGE_BACKEND="memory", ADMIN_USERNAME="owner")
    with TestClient(create_app(settings=settings, storage=storage)):
        pass
    assert storage.get_user_by_username("owner").role == "admin"
