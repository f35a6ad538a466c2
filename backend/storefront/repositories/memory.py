import itertools
import threading
from typing import Dict, List, Optional, Sequence

from storefront.errors import CartItemNotFound, EmptyOrderError
from storefront.repositories.storage import Storage
from storefront.schemas.cart import (
    CartItemOut,
    CartItemWithProduct,
    CartOut,
    CartWithItems,
)
from storefront.schemas.catalog import (
    CategoryIn,
    CategoryOut,
    ProductFilter,
    ProductIn,
    ProductOut,
    ProductUpdate,
    ProductWithCategory,
)
from storefront.schemas.order import (
    OrderFields,
    OrderItemIn,
    OrderItemOut,
    OrderOut,
    OrderWithItems,
)
from storefront.schemas.user import UserIn, UserOut
from storefront.utils.clock import utcnow


class MemoryStorage(Storage):
    """
    Dict-backed store for development and tests.

    Records are pydantic models; callers always get copies. One re-entrant
    lock serializes every operation, so merge-on-add and order creation
    cannot interleave within the process.
    """

    name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._users: Dict[int, UserOut] = {}
        self._categories: Dict[int, CategoryOut] = {}
        self._products: Dict[int, ProductOut] = {}
        self._carts: Dict[int, CartOut] = {}
        self._cart_items: Dict[int, CartItemOut] = {}
        self._orders: Dict[int, OrderOut] = {}
        self._order_items: Dict[int, OrderItemOut] = {}
        self._ids = {
            name: itertools.count(1)
            for name in (
                "user",
                "category",
                "product",
                "cart",
                "cart_item",
                "order",
                "order_item",
            )
        }

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # -- users -----------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[UserOut]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[UserOut]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user.model_copy()
        return None

    def create_user(self, data: UserIn) -> UserOut:
        with self._lock:
            user = UserOut(
                id=self._next_id("user"),
                created_at=utcnow(),
                **data.model_dump(),
            )
            self._users[user.id] = user
            return user.model_copy()

    # -- catalog ---------------------------------------------------------

    def list_categories(self) -> List[CategoryOut]:
        with self._lock:
            cats = sorted(self._categories.values(), key=lambda c: c.name)
            return [c.model_copy() for c in cats]

    def get_category_by_id(self, category_id: int) -> Optional[CategoryOut]:
        with self._lock:
            cat = self._categories.get(category_id)
            return cat.model_copy() if cat else None

    def create_category(self, data: CategoryIn) -> CategoryOut:
        with self._lock:
            cat = CategoryOut(
                id=self._next_id("category"),
                created_at=utcnow(),
                **data.model_dump(),
            )
            self._categories[cat.id] = cat
            return cat.model_copy()

    def list_products(
        self, filters: Optional[ProductFilter] = None
    ) -> List[ProductWithCategory]:
        filters = filters or ProductFilter()
        with self._lock:
            found = [p for p in self._products.values() if filters.matches(p)]
            found.sort(key=lambda p: (p.created_at, p.id), reverse=True)
            return [
                ProductWithCategory(
                    **p.model_dump(),
                    category=self.get_category_by_id(p.category_id)
                    if p.category_id is not None
                    else None,
                )
                for p in found
            ]

    def get_product_by_id(self, product_id: int) -> Optional[ProductOut]:
        with self._lock:
            product = self._products.get(product_id)
            return product.model_copy() if product else None

    def create_product(self, data: ProductIn) -> ProductOut:
        with self._lock:
            now = utcnow()
            product = ProductOut(
                id=self._next_id("product"),
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
            self._products[product.id] = product
            return product.model_copy()

    def _patch_product(self, product_id: int, changes: dict) -> Optional[ProductOut]:
        product = self._products.get(product_id)
        if product is None:
            return None
        changes["updated_at"] = utcnow()
        updated = ProductOut.model_validate({**product.model_dump(), **changes})
        self._products[product_id] = updated
        return updated.model_copy()

    def update_product(
        self, product_id: int, changes: ProductUpdate
    ) -> Optional[ProductOut]:
        with self._lock:
            return self._patch_product(product_id, changes.changes())

    def delete_product(self, product_id: int) -> Optional[ProductOut]:
        with self._lock:
            return self._patch_product(product_id, {"is_active": False})

    def update_stock(self, product_id: int, quantity: int) -> Optional[ProductOut]:
        with self._lock:
            return self._patch_product(
                product_id, {"stock_quantity": quantity, "in_stock": quantity > 0}
            )

    def get_low_stock_products(self) -> List[ProductOut]:
        with self._lock:
            return [
                p.model_copy()
                for p in sorted(self._products.values(), key=lambda p: p.id)
                if p.is_active and p.stock_quantity <= p.low_stock_threshold
            ]

    # -- cart ------------------------------------------------------------

    def get_cart_by_session_id(self, session_id: str) -> Optional[CartWithItems]:
        with self._lock:
            cart = next(
                (c for c in self._carts.values() if c.session_id == session_id), None
            )
            if cart is None:
                return None
            items = []
            for item in sorted(self._cart_items.values(), key=lambda i: i.id):
                if item.cart_id != cart.id:
                    continue
                product = self._products.get(item.product_id)
                if product is None:
                    continue
                items.append(
                    CartItemWithProduct(**item.model_dump(), product=product.model_copy())
                )
            return CartWithItems(**cart.model_dump(), items=items)

    def create_cart(self, session_id: str) -> CartOut:
        with self._lock:
            now = utcnow()
            cart = CartOut(
                id=self._next_id("cart"),
                session_id=session_id,
                created_at=now,
                updated_at=now,
            )
            self._carts[cart.id] = cart
            return cart.model_copy()

    def _touch_cart(self, cart_id: int) -> None:
        cart = self._carts.get(cart_id)
        if cart is not None:
            self._carts[cart_id] = cart.model_copy(update={"updated_at": utcnow()})

    def add_item(self, cart_id: int, product_id: int, quantity: int) -> CartItemOut:
        with self._lock:
            existing = next(
                (
                    i
                    for i in self._cart_items.values()
                    if i.cart_id == cart_id and i.product_id == product_id
                ),
                None,
            )
            if existing is not None:
                item = existing.model_copy(
                    update={"quantity": existing.quantity + quantity}
                )
            else:
                item = CartItemOut(
                    id=self._next_id("cart_item"),
                    cart_id=cart_id,
                    product_id=product_id,
                    quantity=quantity,
                    created_at=utcnow(),
                )
            self._cart_items[item.id] = item
            self._touch_cart(cart_id)
            return item.model_copy()

    def update_item_quantity(self, cart_item_id: int, quantity: int) -> CartItemOut:
        with self._lock:
            item = self._cart_items.get(cart_item_id)
            if item is None:
                raise CartItemNotFound()
            item = item.model_copy(update={"quantity": quantity})
            self._cart_items[cart_item_id] = item
            self._touch_cart(item.cart_id)
            return item.model_copy()

    def remove_item(self, cart_item_id: int) -> None:
        with self._lock:
            item = self._cart_items.pop(cart_item_id, None)
            if item is not None:
                self._touch_cart(item.cart_id)

    def clear_cart(self, cart_id: int) -> None:
        with self._lock:
            doomed = [i.id for i in self._cart_items.values() if i.cart_id == cart_id]
            for item_id in doomed:
                del self._cart_items[item_id]
            self._touch_cart(cart_id)

    # -- orders ----------------------------------------------------------

    def create_order(
        self, fields: OrderFields, items: Sequence[OrderItemIn]
    ) -> OrderWithItems:
        if not items:
            raise EmptyOrderError("An order needs at least one line item")
        with self._lock:
            # build everything first so a bad line leaves nothing behind
            order = OrderOut(
                id=self._next_id("order"), created_at=utcnow(), **fields.model_dump()
            )
            lines = [
                OrderItemOut(
                    id=self._next_id("order_item"), order_id=order.id, **it.model_dump()
                )
                for it in items
            ]
            self._orders[order.id] = order
            for line in lines:
                self._order_items[line.id] = line
            return OrderWithItems(**order.model_dump(), items=lines)

    def get_order_by_id(self, order_id: int) -> Optional[OrderWithItems]:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            lines = sorted(
                (i for i in self._order_items.values() if i.order_id == order_id),
                key=lambda i: i.id,
            )
            return OrderWithItems(
                **order.model_dump(), items=[i.model_copy() for i in lines]
            )

    def list_orders_by_session_id(self, session_id: str) -> List[OrderOut]:
        with self._lock:
            found = [o for o in self._orders.values() if o.session_id == session_id]
            found.sort(key=lambda o: (o.created_at, o.id), reverse=True)
            return [o.model_copy() for o in found]

    def ping(self) -> bool:
        return True
