import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.api.errors import register_error_handlers
from storefront.api.health import router as health_router
from storefront.api.routes_admin import router as admin_router
from storefront.api.routes_cart import router as cart_router
from storefront.api.routes_catalogue import router as catalogue_router
from storefront.api.routes_order import router as order_router
from storefront.config import Settings, get_settings
from storefront.db import init_db, make_engine
from storefront.repositories.memory import MemoryStorage
from storefront.repositories.sql import SqlStorage
from storefront.repositories.storage import Storage
from storefront.seed import seed_admin, seed_catalog
from storefront.utils.logging import configure_logging

log = logging.getLogger(__name__)


def build_storage(settings: Settings) -> Storage:
    """Pick the backend once, at startup."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        log.info("Using in-memory storage")
        return MemoryStorage()
    if backend == "sql":
        engine = make_engine(settings.DATABASE_URL)
        init_db(engine, reset=settings.RESET_DB)
        log.info("Using SQL storage at %s", engine.url.render_as_string(hide_password=True))
        return SqlStorage(engine)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r}")


def create_app(
    settings: Optional[Settings] = None, storage: Optional[Storage] = None
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    storage = storage or build_storage(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # startup
        if settings.SEED_ON_STARTUP:
            seed_catalog(storage)
            seed_admin(storage, settings.ADMIN_USERNAME)
        yield

    app = FastAPI(title="Storefront - Backend", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.FRONTEND_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(health_router, prefix="/api", tags=["health"])

    app.include_router(catalogue_router, prefix="/api", tags=["catalogue"])

    app.include_router(cart_router, tags=["cart"])

    app.include_router(order_router, tags=["orders"])

    app.include_router(admin_router, tags=["admin"])

    return app
