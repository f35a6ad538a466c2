from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from storefront.errors import CartItemNotFound, EmptyOrderError
from storefront.schemas.catalog import ProductFilter, ProductUpdate
from storefront.schemas.order import OrderFields, OrderItemIn
from storefront.schemas.user import UserIn


def _order_fields(session_id="s1", total="100.00"):
    return OrderFields(
        session_id=session_id,
        customer_name="Ana",
        customer_email="ana@example.com",
        customer_phone="555-0100",
        shipping_address="1 Main St",
        city="Springfield",
        zip_code="12345",
        payment_method="card",
        subtotal=Decimal(total),
        shipping=Decimal("0"),
        taxes=Decimal("0"),
        total=Decimal(total),
    )


def _line(product_id=1, name="Tea", price="10.00", quantity=1):
    return OrderItemIn(
        product_id=product_id,
        product_name=name,
        product_price=Decimal(price),
        quantity=quantity,
    )


# -- catalog -------------------------------------------------------------


def test_categories_listed_alphabetically(storage, make_category):
    make_category("Sports")
    make_category("Clothing")
    make_category("Home")
    assert [c.name for c in storage.list_categories()] == ["Clothing", "Home", "Sports"]


def test_products_newest_first_with_category(storage, make_category, make_product):
    cat = make_category()
    first = make_product("First", category_id=cat.id)
    second = make_product("Second")

    listed = storage.list_products()
    assert [p.id for p in listed] == [second.id, first.id]
    assert listed[1].category.slug == "electronics"
    assert listed[0].category is None


def test_filters_are_conjunctive(storage, make_category, make_product):
    phones = make_category("Phones")
    other = make_category("Other")
    make_product("Phone Basic", "99.00", category_id=phones.id)
    hit = make_product("Phone Pro", "499.00", category_id=phones.id)
    make_product("Phone Case", "499.00", category_id=other.id)
    make_product("Laptop", "499.00", category_id=phones.id)
    make_product("Phone Ultra", "1499.00", category_id=phones.id)

    found = storage.list_products(
        ProductFilter(
            category_id=phones.id,
            search="PHONE",
            min_price=Decimal("100"),
            max_price=Decimal("500"),
        )
    )
    assert [p.id for p in found] == [hit.id]


def test_price_bounds_are_inclusive_and_numeric(storage, make_product):
    make_product("Nine", "9.00")
    make_product("Ten", "10.00")
    make_product("Hundred", "100.00")

    found = storage.list_products(
        ProductFilter(min_price=Decimal("10"), max_price=Decimal("100"))
    )
    assert sorted(p.name for p in found) == ["Hundred", "Ten"]


def test_search_matches_name_substring_case_insensitively(storage, make_product):
    make_product("Running Shoes", description="for the track")
    make_product("Desk Lamp", description="running lights")

    found = storage.list_products(ProductFilter(search="run"))
    assert [p.name for p in found] == ["Running Shoes"]


def test_soft_delete(storage, make_product):
    p = make_product()
    deleted = storage.delete_product(p.id)
    assert deleted.is_active is False

    fetched = storage.get_product_by_id(p.id)
    assert fetched is not None
    assert fetched.is_active is False
    assert p.id not in [x.id for x in storage.list_products()]
    assert p.id in [
        x.id for x in storage.list_products(ProductFilter(include_inactive=True))
    ]


def test_missing_product_lookups(storage):
    assert storage.get_product_by_id(999) is None
    assert storage.delete_product(999) is None
    assert storage.update_stock(999, 3) is None
    assert storage.update_product(999, ProductUpdate(name="x")) is None


def test_update_product_is_partial_and_refreshes_updated_at(storage, make_product):
    p = make_product("Tea", "3.00", description="green")
    updated = storage.update_product(p.id, ProductUpdate(price=Decimal("3.50")))

    assert updated.price == Decimal("3.50")
    assert updated.name == "Tea"
    assert updated.description == "green"
    assert updated.updated_at >= p.updated_at
    assert storage.get_product_by_id(p.id).price == Decimal("3.50")


def test_update_rejects_null_for_required_fields():
    with pytest.raises(ValidationError):
        ProductUpdate(name=None)
    assert ProductUpdate(original_price=None).changes() == {"original_price": None}


def test_update_stock_derives_in_stock(storage, make_product):
    p = make_product(stock_quantity=4)
    out = storage.update_stock(p.id, 0)
    assert out.stock_quantity == 0
    assert out.in_stock is False

    back = storage.update_stock(p.id, 7)
    assert back.in_stock is True


def test_low_stock_products(storage, make_product):
    low = make_product("Low", stock_quantity=2, low_stock_threshold=5)
    edge = make_product("Edge", stock_quantity=5, low_stock_threshold=5)
    make_product("Plenty", stock_quantity=50, low_stock_threshold=5)
    gone = make_product("Gone", stock_quantity=0, low_stock_threshold=5)
    storage.delete_product(gone.id)

    assert [p.id for p in storage.get_low_stock_products()] == [low.id, edge.id]


# -- cart ----------------------------------------------------------------


def test_no_cart_until_created(storage):
    assert storage.get_cart_by_session_id("nobody") is None
    cart = storage.create_cart("nobody")
    fetched = storage.get_cart_by_session_id("nobody")
    assert fetched.id == cart.id
    assert fetched.items == []


def test_add_merges_by_product(storage, make_product):
    p = make_product()
    cart = storage.create_cart("s1")

    storage.add_item(cart.id, p.id, 2)
    storage.add_item(cart.id, p.id, 3)

    items = storage.get_cart_by_session_id("s1").items
    assert len(items) == 1
    assert items[0].quantity == 5
    assert items[0].product.name == "Test Coffee"


def test_update_quantity_overwrites(storage, make_product):
    p = make_product()
    cart = storage.create_cart("s1")
    item = storage.add_item(cart.id, p.id, 2)

    updated = storage.update_item_quantity(item.id, 7)
    assert updated.quantity == 7
    assert storage.get_cart_by_session_id("s1").items[0].quantity == 7


def test_update_missing_item_raises(storage):
    with pytest.raises(CartItemNotFound):
        storage.update_item_quantity(12345, 1)


def test_remove_item_is_noop_when_absent(storage, make_product):
    p = make_product()
    cart = storage.create_cart("s1")
    item = storage.add_item(cart.id, p.id, 1)

    storage.remove_item(item.id)
    storage.remove_item(item.id)
    assert storage.get_cart_by_session_id("s1").items == []


def test_clear_cart_only_touches_that_cart(storage, make_product):
    p = make_product()
    mine = storage.create_cart("mine")
    theirs = storage.create_cart("theirs")
    storage.add_item(mine.id, p.id, 1)
    storage.add_item(theirs.id, p.id, 4)

    storage.clear_cart(mine.id)
    assert storage.get_cart_by_session_id("mine").items == []
    assert storage.get_cart_by_session_id("theirs").items[0].quantity == 4


# -- orders --------------------------------------------------------------


def test_create_order_with_items(storage):
    order = storage.create_order(
        _order_fields(), [_line(1, "Tea", "3.00", 2), _line(2, "Coffee", "6.00", 1)]
    )
    assert order.id
    assert order.status == "confirmed"
    assert [i.product_name for i in order.items] == ["Tea", "Coffee"]
    assert all(i.order_id == order.id for i in order.items)

    again = storage.get_order_by_id(order.id)
    assert again.total == Decimal("100.00")
    assert len(again.items) == 2


def test_create_order_rejects_empty_items(storage):
    with pytest.raises(EmptyOrderError):
        storage.create_order(_order_fields(), [])
    assert storage.list_orders_by_session_id("s1") == []


def test_create_order_is_all_or_nothing(storage):
    broken = OrderItemIn.model_construct(
        product_id=2, product_name="Broken", product_price=Decimal("1.00"), quantity=None
    )
    with pytest.raises((ValidationError, IntegrityError)):
        storage.create_order(_order_fields(), [_line(), broken])

    assert storage.list_orders_by_session_id("s1") == []


def test_order_items_are_snapshots(storage, make_product):
    p = make_product("Tea", "3.00")
    order = storage.create_order(_order_fields(), [_line(p.id, p.name, "3.00", 1)])

    storage.update_product(p.id, ProductUpdate(name="Tea v2", price=Decimal("9.00")))
    storage.delete_product(p.id)

    line = storage.get_order_by_id(order.id).items[0]
    assert line.product_name == "Tea"
    assert line.product_price == Decimal("3.00")


def test_orders_by_session_newest_first(storage):
    a = storage.create_order(_order_fields("s1"), [_line()])
    storage.create_order(_order_fields("s2"), [_line()])
    b = storage.create_order(_order_fields("s1"), [_line()])

    assert [o.id for o in storage.list_orders_by_session_id("s1")] == [b.id, a.id]
    assert storage.get_order_by_id(9999) is None


# -- users ---------------------------------------------------------------


def test_user_role_lookup(storage):
    admin = storage.create_user(UserIn(username="root", role="admin"))
    assert storage.get_user(admin.id).role == "admin"
    assert storage.get_user_by_username("root").id == admin.id
    assert storage.get_user_by_username("ghost") is None


def test_ping(storage):
    assert storage.ping() is True
