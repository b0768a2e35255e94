# subsapi/services/user_service.py
from __future__ import annotations

import logging

from subsapi.errors import InvalidCredentials, InvalidInput
from subsapi.models.user import User
from subsapi.repositories.user_repo import UserRepo
from subsapi.services.auth_service import AuthProvider
from subsapi.services.retry import RetryingExecutor

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepo, auth: AuthProvider, executor: RetryingExecutor) -> None:
        self.users = users
        self.auth = auth
        self.executor = executor

    async def register(self, username: str, password: str, email: str) -> User:
        if not username or not username.strip() or not password or not email:
            raise InvalidInput("Invalid user data provided.")
        username = username.strip()
        # hash once: retries must not re-salt
        password_hash = self.auth.hash_password(password)

        async def _op() -> User:
            if await self.users.get_by_username(username) is not None:
                raise InvalidInput("Username already taken.")
            return await self.users.create(
                username=username, password_hash=password_hash, email=email
            )

        user = (await self.executor.execute(_op, name="users.register")).unwrap()
        logger.info("user created id=%s", user.id, extra={"user_id": user.id})
        return user

    async def authenticate(self, username: str, password: str) -> str:
        if not username or not password:
            raise InvalidCredentials("Invalid credentials provided.")

        async def _op() -> User:
            user = await self.users.get_by_username(username)
            if user is None or not self.auth.verify_password(password, user.password_hash):
                raise InvalidCredentials("Invalid credentials")
            return user

        user = (await self.executor.execute(_op, name="users.authenticate")).unwrap()
        logger.info("user authenticated id=%s", user.id, extra={"user_id": user.id})
        return self.auth.issue(user)
