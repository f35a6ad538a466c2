from storefront.errors import ProductNotFound
from storefront.repositories.storage import Storage
from storefront.schemas.cart import CartResponse, CartWithItems
from storefront.services.pricing import calculate_totals


class CartService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def get_or_create_cart(self, session_id: str) -> CartWithItems:
        cart = self.storage.get_cart_by_session_id(session_id)
        if cart is not None:
            return cart
        created = self.storage.create_cart(session_id)
        return CartWithItems(**created.model_dump(), items=[])

    def summary(self, session_id: str) -> CartResponse:
        """The session's cart with its lines and computed totals."""
        cart = self.get_or_create_cart(session_id)
        totals = calculate_totals((it.product.price, it.quantity) for it in cart.items)
        return CartResponse(**cart.model_dump(), totals=totals)

    def add_item(self, session_id: str, product_id: int, quantity: int) -> CartResponse:
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        if self.storage.get_product_by_id(product_id) is None:
            raise ProductNotFound()
        cart = self.get_or_create_cart(session_id)
        self.storage.add_item(cart.id, product_id, quantity)
        return self.summary(session_id)

    def set_quantity(self, session_id: str, item_id: int, quantity: int) -> CartResponse:
        if quantity == 0:
            self.storage.remove_item(item_id)
        else:
            self.storage.update_item_quantity(item_id, quantity)
        return self.summary(session_id)

    def remove_item(self, session_id: str, item_id: int) -> CartResponse:
        self.storage.remove_item(item_id)
        return self.summary(session_id)

    def clear(self, session_id: str) -> CartResponse:
        cart = self.storage.get_cart_by_session_id(session_id)
        if cart is not None:
            self.storage.clear_cart(cart.id)
        return self.summary(session_id)
