from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from storefront.schemas.base import CamelModel, Money, Rating, UtcDatetime


class CategoryIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = None
    slug: str = Field(..., min_length=1, max_length=128, pattern=r"^[a-z0-9-]+$")


class CategoryOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    slug: str
    created_at: UtcDatetime


class ProductIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=256)
    description: Optional[str] = None
    price: Money = Field(..., ge=0)
    original_price: Optional[Money] = Field(None, ge=0)
    image: Optional[str] = None
    category_id: Optional[int] = None
    in_stock: bool = True
    stock_quantity: int = Field(0, ge=0)
    low_stock_threshold: int = Field(5, ge=0)
    rating: Rating = Field(Decimal("0"), ge=0, le=5)
    review_count: int = Field(0, ge=0)
    is_on_sale: bool = False
    sale_percentage: Optional[int] = Field(None, ge=0, le=100)
    is_active: bool = True


class ProductUpdate(CamelModel):
    """Partial update; only fields present in the request are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=256)
    description: Optional[str] = None
    price: Optional[Money] = Field(None, ge=0)
    original_price: Optional[Money] = Field(None, ge=0)
    image: Optional[str] = None
    category_id: Optional[int] = None
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    rating: Optional[Rating] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0)
    is_on_sale: Optional[bool] = None
    sale_percentage: Optional[int] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None

    @field_validator(
        "name",
        "price",
        "in_stock",
        "stock_quantity",
        "low_stock_threshold",
        "rating",
        "review_count",
        "is_on_sale",
        "is_active",
    )
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    original_price: Optional[Money] = None
    image: Optional[str] = None
    category_id: Optional[int] = None
    in_stock: bool
    stock_quantity: int
    low_stock_threshold: int
    rating: Rating
    review_count: int
    is_on_sale: bool
    sale_percentage: Optional[int] = None
    is_active: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ProductWithCategory(ProductOut):
    category: Optional[CategoryOut] = None


class ProductFilter(CamelModel):
    category_id: Optional[int] = None
    search: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    include_inactive: bool = False

    def matches(self, product: ProductOut) -> bool:
        if not self.include_inactive and not product.is_active:
            return False
        if self.category_id is not None and product.category_id != self.category_id:
            return False
        if self.search and self.search.lower() not in product.name.lower():
            return False
        if self.min_price is not None and product.price < self.min_price:
            return False
        if self.max_price is not None and product.price > self.max_price:
            return False
        return True


class StockUpdateIn(CamelModel):
    quantity: int = Field(..., ge=0)
