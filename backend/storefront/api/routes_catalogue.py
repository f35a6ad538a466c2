import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_storage
from storefront.repositories.storage import Storage
from storefront.schemas.catalog import (
    CategoryOut,
    ProductFilter,
    ProductOut,
    ProductWithCategory,
)

router = APIRouter(tags=["catalogue"])

log = logging.getLogger(__name__)


@router.get("/categories", response_model=List[CategoryOut], summary="List categories")
def list_categories(storage: Storage = Depends(get_storage)):
    try:
        return storage.list_categories()
    except Exception:
        log.exception("listing categories failed")
        raise HTTPException(status_code=500, detail="Error fetching categories")


@router.get(
    "/products", response_model=List[ProductWithCategory], summary="List products"
)
def list_products(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    search: Optional[str] = Query(None, description="name contains (case-insensitive)"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    storage: Storage = Depends(get_storage),
):
    filters = ProductFilter(
        category_id=category_id or None,
        search=search or None,
        min_price=min_price,
        max_price=max_price,
    )
    try:
        return storage.list_products(filters)
    except Exception:
        log.exception("listing products failed")
        raise HTTPException(status_code=500, detail="Error fetching products")


@router.get(
    "/products/{product_id}", response_model=ProductOut, summary="Get product by id"
)
def get_product(product_id: int, storage: Storage = Depends(get_storage)):
    try:
        product = storage.get_product_by_id(product_id)
    except Exception:
        log.exception("fetching product %s failed", product_id)
        raise HTTPException(status_code=500, detail="Error fetching product")
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
