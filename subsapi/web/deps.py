# subsapi/web/deps.py
from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from subsapi.container import build_auth, build_executor, build_services
from subsapi.db import get_session
from subsapi.errors import InvalidToken
from subsapi.services.auth_service import AuthProvider, Identity
from subsapi.services.retry import RetryingExecutor
from subsapi.services.subscription_service import SubscriptionService
from subsapi.services.user_service import UserService
from subsapi.utils.dates import now_utc

bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_auth_provider() -> AuthProvider:
    return build_auth()


@lru_cache(maxsize=1)
def get_executor() -> RetryingExecutor:
    return build_executor()


def get_clock() -> Callable[[], datetime]:
    return now_utc


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    auth: AuthProvider = Depends(get_auth_provider),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Missing bearer token")
    return auth.validate(credentials.credentials)


async def get_services(
    session: AsyncSession = Depends(get_session),
    auth: AuthProvider = Depends(get_auth_provider),
    executor: RetryingExecutor = Depends(get_executor),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> dict:
    return build_services(session, auth=auth, executor=executor, clock=clock)


async def get_subscription_service(services: dict = Depends(get_services)) -> SubscriptionService:
    return services["subscriptions"]


async def get_user_service(services: dict = Depends(get_services)) -> UserService:
    return services["users"]
