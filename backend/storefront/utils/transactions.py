import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

log = logging.getLogger(__name__)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """
    Open a session and run the block inside one transaction.
    Commits on normal exit; on any exception the whole unit is rolled back
    and the exception propagates.
        with session_scope(factory) as s:
            ... DB work ...
    """
    with factory() as session:
        try:
            with session.begin():
                yield session
        except Exception:
            log.debug("transaction rolled back", exc_info=True)
            raise
