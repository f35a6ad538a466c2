import logging

from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_session_id, get_storage
from storefront.errors import CartItemNotFound, ProductNotFound
from storefront.repositories.storage import Storage
from storefront.schemas.cart import AddToCartIn, CartResponse, UpdateCartItemIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])

log = logging.getLogger(__name__)


def get_cart_service(storage: Storage = Depends(get_storage)) -> CartService:
    return CartService(storage)


@router.get("", response_model=CartResponse, summary="Get cart")
def get_cart(
    session_id: str = Depends(get_session_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.summary(session_id)
    except Exception:
        log.exception("fetching cart for session %s failed", session_id)
        raise HTTPException(status_code=500, detail="Error fetching cart")


@router.post("/add", response_model=CartResponse, summary="Add item to cart")
def add_item(
    payload: AddToCartIn,
    session_id: str = Depends(get_session_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.add_item(session_id, payload.product_id, payload.quantity)
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        log.exception("adding product %s to cart failed", payload.product_id)
        raise HTTPException(status_code=500, detail="Error adding product to cart")


@router.put("/items/{item_id}", response_model=CartResponse, summary="Set quantity")
def update_item(
    item_id: int,
    payload: UpdateCartItemIn,
    session_id: str = Depends(get_session_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.set_quantity(session_id, item_id, payload.quantity)
    except CartItemNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception:
        log.exception("updating cart item %s failed", item_id)
        raise HTTPException(status_code=500, detail="Error updating cart item")


@router.delete("/items/{item_id}", response_model=CartResponse, summary="Remove item")
def remove_item(
    item_id: int,
    session_id: str = Depends(get_session_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.remove_item(session_id, item_id)
    except Exception:
        log.exception("removing cart item %s failed", item_id)
        raise HTTPException(status_code=500, detail="Error removing cart item")


@router.delete("", response_model=CartResponse, summary="Clear cart")
def clear_cart(
    session_id: str = Depends(get_session_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.clear(session_id)
    except Exception:
        log.exception("clearing cart for session %s failed", session_id)
        raise HTTPException(status_code=500, detail="Error clearing cart")
