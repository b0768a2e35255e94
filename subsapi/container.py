# subsapi/container.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from subsapi.config import settings
from subsapi.db import engine
from subsapi.models.base import Base

from subsapi.repositories.subscription_repo import SubscriptionRepo
from subsapi.repositories.user_repo import UserRepo

from subsapi.services.auth_service import AuthProvider
from subsapi.services.retry import RetryingExecutor, RetryPolicy
from subsapi.services.subscription_service import SubscriptionService
from subsapi.services.user_service import UserService
from subsapi.utils.dates import now_utc


async def init_db() -> None:
    """
    Dev-only schema bootstrap: create missing tables.
    In production run `alembic upgrade head`.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def build_auth() -> AuthProvider:
    return AuthProvider.from_settings(settings)


def build_executor() -> RetryingExecutor:
    return RetryingExecutor(RetryPolicy.from_settings(settings))


def build_services(
    session: AsyncSession,
    *,
    auth: AuthProvider | None = None,
    executor: RetryingExecutor | None = None,
    clock: Callable[[], datetime] = now_utc,
) -> dict[str, Any]:
    """
    Wires repositories and services for one session. Returns a dict.
    """
    auth = auth or build_auth()
    executor = executor or build_executor()

    # repos
    subs_repo = SubscriptionRepo(session)
    users_repo = UserRepo(session)

    # services
    subs_svc = SubscriptionService(subs_repo, users_repo, executor, clock=clock)
    users_svc = UserService(users_repo, auth, executor)

    return {
        "subscriptions": subs_svc,
        "users": users_svc,
    }
