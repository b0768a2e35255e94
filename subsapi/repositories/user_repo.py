from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from subsapi.errors import InvalidInput
from subsapi.models.user import User
from subsapi.repositories.base import BaseRepo, guarded


class UserRepository(BaseRepo):
    async def get(self, user_id: int) -> Optional[User]:
        async with guarded(self.s, "user.get"):
            return await self.s.get(User, user_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        async with guarded(self.s, "user.get_by_username"):
            q = await self.s.execute(select(User).where(User.username == username))
            return q.scalar_one_or_none()

    async def create(self, *, username: str, password_hash: str, email: str) -> User:
        u = User(username=username, password_hash=password_hash, email=email)
        async with guarded(self.s, "user.create"):
            self.s.add(u)
            try:
                await self.s.commit()
            except IntegrityError as e:
                # unique index on username lost a concurrent insert
                await self.s.rollback()
                raise InvalidInput("Username already taken.") from e
            await self.s.refresh(u)
        return u


UserRepo = UserRepository
__all__ = ["UserRepository", "UserRepo"]
