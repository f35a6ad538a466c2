from fastapi import APIRouter, Depends

from storefront.api.deps import get_storage
from storefront.repositories.storage import Storage

router = APIRouter()


@router.get("/health", tags=["health"])
def health(storage: Storage = Depends(get_storage)):
    storage_ok = storage.ping()
    return {
        "status": "ok" if storage_ok else "degraded",
        "backend": storage.name,
        "storage": storage_ok,
    }
