import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from storefront.db import make_session_factory
from storefront.errors import CartItemNotFound, EmptyOrderError
from storefront.models import Cart, CartItem, Category, Order, OrderItem, Product, User
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
from storefront.schemas.order import OrderFields, OrderItemIn, OrderOut, OrderWithItems
from storefront.schemas.user import UserIn, UserOut
from storefront.utils.clock import utcnow
from storefront.utils.transactions import session_scope

log = logging.getLogger(__name__)


class SqlStorage(Storage):
    """SQLAlchemy-backed store. Each call is its own session and transaction."""

    name = "sql"

    def __init__(self, engine: Engine):
        self.engine = engine
        self.Session = make_session_factory(engine)

    # -- users -----------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[UserOut]:
        with session_scope(self.Session) as s:
            user = s.get(User, user_id)
            return UserOut.model_validate(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserOut]:
        with session_scope(self.Session) as s:
            user = s.scalar(select(User).where(User.username == username))
            return UserOut.model_validate(user) if user else None

    def create_user(self, data: UserIn) -> UserOut:
        with session_scope(self.Session) as s:
            user = User(**data.model_dump())
            s.add(user)
            s.flush()
            return UserOut.model_validate(user)

    # -- catalog ---------------------------------------------------------

    def list_categories(self) -> List[CategoryOut]:
        with session_scope(self.Session) as s:
            rows = s.scalars(select(Category).order_by(Category.name)).all()
            return [CategoryOut.model_validate(c) for c in rows]

    def get_category_by_id(self, category_id: int) -> Optional[CategoryOut]:
        with session_scope(self.Session) as s:
            cat = s.get(Category, category_id)
            return CategoryOut.model_validate(cat) if cat else None

    def create_category(self, data: CategoryIn) -> CategoryOut:
        with session_scope(self.Session) as s:
            cat = Category(**data.model_dump())
            s.add(cat)
            s.flush()
            return CategoryOut.model_validate(cat)

    def list_products(
        self, filters: Optional[ProductFilter] = None
    ) -> List[ProductWithCategory]:
        filters = filters or ProductFilter()
        query = select(Product).options(joinedload(Product.category))
        if not filters.include_inactive:
            query = query.where(Product.is_active.is_(True))
        if filters.category_id is not None:
            query = query.where(Product.category_id == filters.category_id)
        if filters.search:
            query = query.where(Product.name.icontains(filters.search, autoescape=True))
        if filters.min_price is not None:
            query = query.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Product.price <= filters.max_price)
        query = query.order_by(Product.created_at.desc(), Product.id.desc())

        with session_scope(self.Session) as s:
            rows = s.scalars(query).unique().all()
            return [ProductWithCategory.model_validate(p) for p in rows]

    def get_product_by_id(self, product_id: int) -> Optional[ProductOut]:
        with session_scope(self.Session) as s:
            product = s.get(Product, product_id)
            return ProductOut.model_validate(product) if product else None

    def create_product(self, data: ProductIn) -> ProductOut:
        with session_scope(self.Session) as s:
            product = Product(**data.model_dump())
            s.add(product)
            s.flush()
            return ProductOut.model_validate(product)

    def _patch_product(self, product_id: int, changes: dict) -> Optional[ProductOut]:
        with session_scope(self.Session) as s:
            product = s.get(Product, product_id)
            if product is None:
                return None
            for field, value in changes.items():
                setattr(product, field, value)
            product.updated_at = utcnow()
            s.flush()
            return ProductOut.model_validate(product)

    def update_product(
        self, product_id: int, changes: ProductUpdate
    ) -> Optional[ProductOut]:
        return self._patch_product(product_id, changes.changes())

    def delete_product(self, product_id: int) -> Optional[ProductOut]:
        return self._patch_product(product_id, {"is_active": False})

    def update_stock(self, product_id: int, quantity: int) -> Optional[ProductOut]:
        return self._patch_product(
            product_id, {"stock_quantity": quantity, "in_stock": quantity > 0}
        )

    def get_low_stock_products(self) -> List[ProductOut]:
        query = (
            select(Product)
            .where(
                Product.is_active.is_(True),
                Product.stock_quantity <= Product.low_stock_threshold,
            )
            .order_by(Product.id)
        )
        with session_scope(self.Session) as s:
            return [ProductOut.model_validate(p) for p in s.scalars(query).all()]

    # -- cart ------------------------------------------------------------

    def get_cart_by_session_id(self, session_id: str) -> Optional[CartWithItems]:
        with session_scope(self.Session) as s:
            cart = s.scalar(select(Cart).where(Cart.session_id == session_id))
            if cart is None:
                return None
            product_ids = [i.product_id for i in cart.items]
            products = {}
            if product_ids:
                rows = s.scalars(select(Product).where(Product.id.in_(product_ids)))
                products = {p.id: ProductOut.model_validate(p) for p in rows}
            items = [
                CartItemWithProduct(
                    **CartItemOut.model_validate(i).model_dump(),
                    product=products[i.product_id],
                )
                for i in cart.items
                if i.product_id in products
            ]
            return CartWithItems(**CartOut.model_validate(cart).model_dump(), items=items)

    def create_cart(self, session_id: str) -> CartOut:
        with session_scope(self.Session) as s:
            cart = Cart(session_id=session_id)
            s.add(cart)
            s.flush()
            return CartOut.model_validate(cart)

    @staticmethod
    def _touch_cart(s, cart_id: int) -> None:
        cart = s.get(Cart, cart_id)
        if cart is not None:
            cart.updated_at = utcnow()

    def add_item(self, cart_id: int, product_id: int, quantity: int) -> CartItemOut:
        with session_scope(self.Session) as s:
            item = s.scalar(
                select(CartItem).where(
                    CartItem.cart_id == cart_id, CartItem.product_id == product_id
                )
            )
            if item is not None:
                item.quantity = item.quantity + quantity
            else:
                item = CartItem(cart_id=cart_id, product_id=product_id, quantity=quantity)
                s.add(item)
            self._touch_cart(s, cart_id)
            s.flush()
            return CartItemOut.model_validate(item)

    def update_item_quantity(self, cart_item_id: int, quantity: int) -> CartItemOut:
        with session_scope(self.Session) as s:
            item = s.get(CartItem, cart_item_id)
            if item is None:
                raise CartItemNotFound()
            item.quantity = quantity
            self._touch_cart(s, item.cart_id)
            s.flush()
            return CartItemOut.model_validate(item)

    def remove_item(self, cart_item_id: int) -> None:
        with session_scope(self.Session) as s:
            item = s.get(CartItem, cart_item_id)
            if item is None:
                return
            self._touch_cart(s, item.cart_id)
            s.delete(item)

    def clear_cart(self, cart_id: int) -> None:
        with session_scope(self.Session) as s:
            s.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
            self._touch_cart(s, cart_id)

    # -- orders ----------------------------------------------------------

    def create_order(
        self, fields: OrderFields, items: Sequence[OrderItemIn]
    ) -> OrderWithItems:
        if not items:
            raise EmptyOrderError("An order needs at least one line item")
        # one transaction: a failing line rolls back the order row too
        with session_scope(self.Session) as s:
            order = Order(**fields.model_dump())
            order.items = [OrderItem(**it.model_dump()) for it in items]
            s.add(order)
            s.flush()
            return OrderWithItems.model_validate(order)

    def get_order_by_id(self, order_id: int) -> Optional[OrderWithItems]:
        with session_scope(self.Session) as s:
            order = s.get(Order, order_id, options=[joinedload(Order.items)])
            return OrderWithItems.model_validate(order) if order else None

    def list_orders_by_session_id(self, session_id: str) -> List[OrderOut]:
        query = (
            select(Order)
            .where(Order.session_id == session_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        with session_scope(self.Session) as s:
            return [OrderOut.model_validate(o) for o in s.scalars(query).all()]

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            log.warning("storage ping failed", exc_info=True)
            return False
