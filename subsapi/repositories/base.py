# subsapi/repositories/base.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from subsapi.errors import PersistenceError, TransientPersistenceError

logger = logging.getLogger(__name__)


def classify(exc: SQLAlchemyError) -> PersistenceError:
    if isinstance(exc, (OperationalError, InterfaceError, PoolTimeoutError)):
        return TransientPersistenceError(f"database unavailable: {exc.__class__.__name__}")
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return TransientPersistenceError("database connection invalidated")
    return PersistenceError(f"database error: {exc.__class__.__name__}")


@asynccontextmanager
async def guarded(s: AsyncSession, op: str) -> AsyncIterator[AsyncSession]:
    """Rolls back and re-raises store failures as PersistenceError subclasses."""
    try:
        yield s
    except SQLAlchemyError as e:
        err = classify(e)
        logger.warning("db_error op=%s kind=%s error=%s", op, err.code, e.__class__.__name__)
        try:
            await s.rollback()
        except SQLAlchemyError:
            logger.exception("rollback failed op=%s", op)
        raise err from e


class BaseRepo:
    def __init__(self, s: AsyncSession) -> None:
        self.s = s
