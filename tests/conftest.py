"""
Shared pytest fixtures: in-memory SQLite, fast retry policy, fixed clock,
and an httpx client bound to the ASGI app.
"""

import os
from datetime import datetime, timezone

# keep the app engine away from any real database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-0123")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from subsapi.db import enable_sqlite_foreign_keys
from subsapi.models import Base
from subsapi.repositories.subscription_repo import SubscriptionRepo
from subsapi.repositories.user_repo import UserRepo
from subsapi.services.auth_service import AuthProvider
from subsapi.services.retry import RetryingExecutor, RetryPolicy

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(eng)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def executor(sleeps):
    # default policy, but sleeps are only recorded
    return RetryingExecutor(RetryPolicy(), sleep=sleeps)


@pytest.fixture
def auth():
    return AuthProvider(
        "test-secret-key-with-enough-length-0123",
        issuer="subsapi-test",
        audience="subsapi-test-clients",
        expire_minutes=30,
    )


@pytest.fixture
def subs_repo(session):
    return SubscriptionRepo(session)


@pytest.fixture
def users_repo(session):
    return UserRepo(session)


@pytest.fixture
async def user(users_repo, auth):
    return await users_repo.create(
        username="alice", password_hash=auth.hash_password("s3cret"), email="alice@example.com"
    )


@pytest.fixture
async def client(session_factory, auth, executor):
    from subsapi.db import get_session
    from subsapi.web import deps
    from subsapi.web.server import create_app

    app = create_app()

    async def _session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[deps.get_auth_provider] = lambda: auth
    app.dependency_overrides[deps.get_executor] = lambda: executor
    app.dependency_overrides[deps.get_clock] = lambda: (lambda: NOW)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
