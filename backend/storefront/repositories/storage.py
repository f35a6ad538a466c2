from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from storefront.schemas.cart import CartItemOut, CartOut, CartWithItems
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


class Storage(ABC):
    """
    Persistence contract shared by the in-memory and SQL backends.

    Lookups signal "not found" by returning None. The exception is
    `update_item_quantity`, which raises CartItemNotFound.
    """

    name = "abstract"

    # -- users -----------------------------------------------------------

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserOut]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserOut]: ...

    @abstractmethod
    def create_user(self, data: UserIn) -> UserOut: ...

    # -- catalog ---------------------------------------------------------

    @abstractmethod
    def list_categories(self) -> List[CategoryOut]:
        """All categories, alphabetical by name."""

    @abstractmethod
    def get_category_by_id(self, category_id: int) -> Optional[CategoryOut]: ...

    @abstractmethod
    def create_category(self, data: CategoryIn) -> CategoryOut: ...

    @abstractmethod
    def list_products(
        self, filters: Optional[ProductFilter] = None
    ) -> List[ProductWithCategory]:
        """Products matching every supplied filter, newest first."""

    @abstractmethod
    def get_product_by_id(self, product_id: int) -> Optional[ProductOut]:
        """Point lookup; soft-deleted products are still returned."""

    @abstractmethod
    def create_product(self, data: ProductIn) -> ProductOut: ...

    @abstractmethod
    def update_product(
        self, product_id: int, changes: ProductUpdate
    ) -> Optional[ProductOut]: ...

    @abstractmethod
    def delete_product(self, product_id: int) -> Optional[ProductOut]:
        """Soft delete: flips is_active off and keeps the row."""

    @abstractmethod
    def update_stock(self, product_id: int, quantity: int) -> Optional[ProductOut]: ...

    @abstractmethod
    def get_low_stock_products(self) -> List[ProductOut]: ...

    # -- cart ------------------------------------------------------------

    @abstractmethod
    def get_cart_by_session_id(self, session_id: str) -> Optional[CartWithItems]:
        """The session's cart with product-joined lines; None if no cart exists yet."""

    @abstractmethod
    def create_cart(self, session_id: str) -> CartOut: ...

    @abstractmethod
    def add_item(self, cart_id: int, product_id: int, quantity: int) -> CartItemOut:
        """Insert a line, or increase the quantity of the existing line for the product."""

    @abstractmethod
    def update_item_quantity(self, cart_item_id: int, quantity: int) -> CartItemOut: ...

    @abstractmethod
    def remove_item(self, cart_item_id: int) -> None: ...

    @abstractmethod
    def clear_cart(self, cart_id: int) -> None: ...

    # -- orders ----------------------------------------------------------

    @abstractmethod
    def create_order(
        self, fields: OrderFields, items: Sequence[OrderItemIn]
    ) -> OrderWithItems:
        """Persist the order and its lines together, or nothing at all."""

    @abstractmethod
    def get_order_by_id(self, order_id: int) -> Optional[OrderWithItems]: ...

    @abstractmethod
    def list_orders_by_session_id(self, session_id: str) -> List[OrderOut]: ...

    # -- health ----------------------------------------------------------

    @abstractmethod
    def ping(self) -> bool: ...
