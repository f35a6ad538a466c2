class StorefrontError(Exception):
    pass


class NotFoundError(StorefrontError):
    message = "Resource not found"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ProductNotFound(NotFoundError):
    message = "Product not found"


class CartItemNotFound(NotFoundError):
    message = "Cart item not found"


class OrderNotFound(NotFoundError):
    message = "Order not found"


class EmptyOrderError(StorefrontError):
    pass
