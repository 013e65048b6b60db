"""Unit of Work for all-or-nothing writes.

Usage:
    with UnitOfWork(session_factory) as uow:
        uow.session.add(request)
        uow.session.flush()
        uow.session.add(notification)

Leaving the block normally commits; any exception rolls back every write made
through ``uow.session`` and propagates. Store failures surface as
``StoreError``; domain errors propagate unchanged.
"""

import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contact_access.core.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitOfWork:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._session: Optional[Session] = None

    def __enter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        session = self._session
        try:
            if exc_type is None:
                try:
                    session.commit()
                except SQLAlchemyError as exc:
                    session.rollback()
                    logger.error("uow.commit_failed", extra={"error": str(exc)})
                    raise StoreError(cause=exc) from exc
            else:
                session.rollback()
                if isinstance(exc_val, SQLAlchemyError):
                    logger.error("uow.rolled_back", extra={"error": str(exc_val)})
                    raise StoreError(cause=exc_val) from exc_val
        finally:
            session.close()
            self._session = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError(
                "Session not available. Use 'with UnitOfWork(...) as uow:' pattern."
            )
        return self._session


def run_in_transaction(session_factory: Callable[[], Session], work: Callable[[Session], T]) -> T:
    """Run ``work`` inside a fresh unit of work and return its result."""
    with UnitOfWork(session_factory) as uow:
        return work(uow.session)
