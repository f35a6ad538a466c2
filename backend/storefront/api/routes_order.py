import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_session_id, get_storage
from storefront.errors import EmptyOrderError, OrderNotFound
from storefront.repositories.storage import Storage
from storefront.schemas.order import CheckoutIn, CheckoutOut, OrderOut, OrderWithItems
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api", tags=["orders"])

log = logging.getLogger(__name__)


def get_order_service(storage: Storage = Depends(get_storage)) -> OrderService:
    return OrderService(storage)


@router.post("/checkout", response_model=CheckoutOut, summary="Create order (checkout)")
def checkout(
    payload: CheckoutIn,
    session_id: str = Depends(get_session_id),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.checkout(session_id, payload)
    except EmptyOrderError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        log.exception("checkout failed for session %s", session_id)
        raise HTTPException(status_code=500, detail="Error processing order")


@router.get("/orders", response_model=List[OrderOut], summary="Session order history")
def list_orders(
    session_id: str = Depends(get_session_id),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.list_orders(session_id)
    except Exception:
        log.exception("listing orders for session %s failed", session_id)
        raise HTTPException(status_code=500, detail="Error fetching orders")


@router.get("/orders/{order_id}", response_model=OrderWithItems, summary="Get order")
def get_order(order_id: int, svc: OrderService = Depends(get_order_service)):
    try:
        return svc.get_order(order_id)
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception:
        log.exception("fetching order %s failed", order_id)
        raise HTTPException(status_code=500, detail="Error fetching order")
