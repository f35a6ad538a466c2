import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

log = logging.getLogger(__name__)


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build an engine for `database_url`.

    SQLite connections are shared with FastAPI's worker threads, and an
    in-memory SQLite URL must keep a single connection or every session
    would see its own empty database.
    """
    kwargs = {"future": True, "echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine, reset: bool = False) -> None:
    """Create the schema, dropping existing tables first when `reset` is set."""
    # populate Base.metadata
    from storefront import models  # noqa: F401

    if reset:
        log.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    log.info("Database initialized: %s", ", ".join(sorted(Base.metadata.tables)))
