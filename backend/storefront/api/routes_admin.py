import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_storage, require_admin
from storefront.repositories.storage import Storage
from storefront.schemas.catalog import (
    CategoryIn,
    CategoryOut,
    ProductFilter,
    ProductIn,
    ProductOut,
    ProductUpdate,
    ProductWithCategory,
    StockUpdateIn,
)
from storefront.schemas.user import UserIn, UserOut

router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)

log = logging.getLogger(__name__)


def _product_or_404(product):
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_category(storage: Storage, category_id):
    if category_id is not None and storage.get_category_by_id(category_id) is None:
        raise HTTPException(status_code=400, detail="Unknown category")


@router.get(
    "/products",
    response_model=List[ProductWithCategory],
    summary="List products, optionally including inactive ones",
)
def list_products(
    include_inactive: bool = Query(False, alias="includeInactive"),
    storage: Storage = Depends(get_storage),
):
    return storage.list_products(ProductFilter(include_inactive=include_inactive))


@router.get(
    "/products/low-stock",
    response_model=List[ProductOut],
    summary="Active products at or below their low-stock threshold",
)
def low_stock(storage: Storage = Depends(get_storage)):
    return storage.get_low_stock_products()


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, storage: Storage = Depends(get_storage)):
    _check_category(storage, payload.category_id)
    product = storage.create_product(payload)
    log.info("product %s created", product.id)
    return product


@router.patch("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int, payload: ProductUpdate, storage: Storage = Depends(get_storage)
):
    _check_category(storage, payload.category_id)
    return _product_or_404(storage.update_product(product_id, payload))


@router.delete(
    "/products/{product_id}", response_model=ProductOut, summary="Soft delete"
)
def delete_product(product_id: int, storage: Storage = Depends(get_storage)):
    product = _product_or_404(storage.delete_product(product_id))
    log.info("product %s deactivated", product_id)
    return product


@router.put("/products/{product_id}/stock", response_model=ProductOut)
def update_stock(
    product_id: int, payload: StockUpdateIn, storage: Storage = Depends(get_storage)
):
    return _product_or_404(storage.update_stock(product_id, payload.quantity))


@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryIn, storage: Storage = Depends(get_storage)):
    if any(c.slug == payload.slug for c in storage.list_categories()):
        raise HTTPException(status_code=409, detail="Category slug already exists")
    return storage.create_category(payload)


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(payload: UserIn, storage: Storage = Depends(get_storage)):
    if storage.get_user_by_username(payload.username) is not None:
        raise HTTPException(status_code=409, detail="Username already taken")
    return storage.create_user(payload)
