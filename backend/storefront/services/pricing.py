"""
Cart and order totals.

This is the only place totals are computed: the cart summary returned by
GET /api/cart and the amounts stored on an order both come from
`calculate_totals`, so what the shopper sees is what gets recorded.
"""
from decimal import Decimal
from typing import Iterable, Tuple

from storefront.schemas.base import CamelModel, Money, quantize_money

FREE_SHIPPING_THRESHOLD = Decimal("1000")
FLAT_SHIPPING = Decimal("15")
TAX_RATE = Decimal("0.10")


class Totals(CamelModel):
    subtotal: Money
    shipping: Money
    taxes: Money
    total: Money


def shipping_for(subtotal: Decimal) -> Decimal:
    # strictly greater: a subtotal of exactly 1000.00 still pays shipping
    if subtotal > FREE_SHIPPING_THRESHOLD:
        return Decimal("0")
    return FLAT_SHIPPING


def calculate_totals(lines: Iterable[Tuple[Decimal, int]]) -> Totals:
    """
    lines: (unit_price, quantity) pairs.
    The subtotal is summed at full precision, then rounded half-up to cents
    before shipping and taxes are derived from it.
    """
    raw = sum((Decimal(price) * qty for price, qty in lines), Decimal("0"))
    subtotal = quantize_money(raw)
    shipping = quantize_money(shipping_for(subtotal))
    taxes = quantize_money(subtotal * TAX_RATE)
    return Totals(
        subtotal=subtotal,
        shipping=shipping,
        taxes=taxes,
        total=subtotal + shipping + taxes,
    )
