# subsapi/db.py
from __future__ import annotations

from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from subsapi.config import settings


def enable_sqlite_foreign_keys(eng: AsyncEngine) -> None:
    """SQLite ignores FOREIGN KEY and ON DELETE CASCADE unless the pragma is on per connection."""
    if eng.dialect.name != "sqlite":
        return

    @event.listens_for(eng.sync_engine, "connect")
    def _fk_pragma(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


# === 1. Engine ===
# Example DSN: postgresql+asyncpg://app:app@db:5432/subscriptions
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
)
enable_sqlite_foreign_keys(engine)


# === 2. Sessions ===
SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# === 3. Dependency for FastAPI ===
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One SQLAlchemy session per request."""
    async with SessionLocal() as session:
        yield session
