from decimal import Decimal
from typing import List

from pydantic import EmailStr, Field

from storefront.schemas.base import CamelModel, Money, UtcDatetime


class OrderItemIn(CamelModel):
    product_id: int
    product_name: str = Field(..., min_length=1)
    # whole cents only
    product_price: Decimal = Field(..., ge=0, decimal_places=2)
    quantity: int = Field(..., ge=1)


class OrderFields(CamelModel):
    session_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    city: str
    zip_code: str
    payment_method: str
    subtotal: Money
    shipping: Money
    taxes: Money
    total: Money
    status: str = "confirmed"


class OrderItemOut(CamelModel):
    id: int
    order_id: int
    product_id: int
    product_name: str
    product_price: Money
    quantity: int


class OrderOut(CamelModel):
    id: int
    session_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    city: str
    zip_code: str
    payment_method: str
    subtotal: Money
    shipping: Money
    taxes: Money
    total: Money
    status: str
    created_at: UtcDatetime


class OrderWithItems(OrderOut):
    items: List[OrderItemOut] = []


class CheckoutIn(CamelModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1)
    shipping_address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1)
    items: List[OrderItemIn] = Field(..., min_length=1)


class CheckoutOut(CamelModel):
    message: str
    order_id: int
    total: Money
