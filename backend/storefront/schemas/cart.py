from typing import List

from pydantic import Field

from storefront.schemas.base import CamelModel, UtcDatetime
from storefront.schemas.catalog import ProductOut
from storefront.services.pricing import Totals


class AddToCartIn(CamelModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1)


class UpdateCartItemIn(CamelModel):
    # 0 removes the line
    quantity: int = Field(..., ge=0)


class CartOut(CamelModel):
    id: int
    session_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CartItemOut(CamelModel):
    id: int
    cart_id: int
    product_id: int
    quantity: int
    created_at: UtcDatetime


class CartItemWithProduct(CartItemOut):
    product: ProductOut


class CartWithItems(CartOut):
    items: List[CartItemWithProduct] = []


class CartResponse(CartWithItems):
    totals: Totals
