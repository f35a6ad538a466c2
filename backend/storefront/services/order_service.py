import logging
from typing import List, Optional

from storefront.errors import OrderNotFound
from storefront.repositories.storage import Storage
from storefront.schemas.order import (
    CheckoutIn,
    CheckoutOut,
    OrderFields,
    OrderOut,
    OrderWithItems,
)
from storefront.services.pricing import calculate_totals

log = logging.getLogger(__name__)

ORDER_CONFIRMED = "confirmed"


class OrderService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def checkout(self, session_id: str, payload: CheckoutIn) -> CheckoutOut:
        """
        Record an order for the submitted lines, then empty the session's cart.

        Totals come from the prices in the request, not from the catalog.
        The cart is only cleared once the order has been stored.
        """
        totals = calculate_totals((it.product_price, it.quantity) for it in payload.items)
        fields = OrderFields(
            session_id=session_id,
            customer_name=payload.customer_name,
            customer_email=str(payload.customer_email),
            customer_phone=payload.customer_phone,
            shipping_address=payload.shipping_address,
            city=payload.city,
            zip_code=payload.zip_code,
            payment_method=payload.payment_method,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            taxes=totals.taxes,
            total=totals.total,
            status=ORDER_CONFIRMED,
        )
        order = self.storage.create_order(fields, payload.items)
        log.info(
            "order %s created for session %s: %d lines, total %s",
            order.id,
            session_id,
            len(order.items),
            order.total,
        )

        cart = self.storage.get_cart_by_session_id(session_id)
        if cart is not None:
            self.storage.clear_cart(cart.id)

        return CheckoutOut(
            message="Order processed successfully", order_id=order.id, total=order.total
        )

    def list_orders(self, session_id: str) -> List[OrderOut]:
        return self.storage.list_orders_by_session_id(session_id)

    def get_order(self, order_id: int) -> OrderWithItems:
        order: Optional[OrderWithItems] = self.storage.get_order_by_id(order_id)
        if order is None:
            raise OrderNotFound()
        return order
