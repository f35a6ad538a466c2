from storefront.models.cart import Cart, CartItem
from storefront.models.category import Category
from storefront.models.order import Order, OrderItem
from storefront.models.product import Product
from storefront.models.user import User

__all__ = ["Cart", "CartItem", "Category", "Order", "OrderItem", "Product", "User"]
