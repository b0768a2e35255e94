from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, delete

from subsapi.models.subscription import Subscription
from subsapi.repositories.base import BaseRepo, guarded
from subsapi.utils.dates import as_utc, day_start, utc_date


class SubscriptionRepo(BaseRepo):
    async def create(
        self,
        *,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
        subscription_type: str,
    ) -> Subscription:
        sub = Subscription(
            user_id=user_id,
            start_date=as_utc(start_date),
            end_date=as_utc(end_date),
            subscription_type=subscription_type,
        )
        async with guarded(self.s, "subscription.create"):
            self.s.add(sub)
            await self.s.commit()
            await self.s.refresh(sub)
        return sub

    async def get(self, subscription_id: int) -> Optional[Subscription]:
        async with guarded(self.s, "subscription.get"):
            return await self.s.get(Subscription, subscription_id)

    async def replace(
        self,
        subscription_id: int,
        *,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
        subscription_type: str,
    ) -> Optional[Subscription]:
        """Full replace of the mutable fields. ``None`` when the row is missing."""
        async with guarded(self.s, "subscription.replace"):
            sub = await self.s.get(Subscription, subscription_id)
            if sub is None:
                return None
            sub.user_id = user_id
            sub.start_date = as_utc(start_date)
            sub.end_date = as_utc(end_date)
            sub.subscription_type = subscription_type
            await self.s.commit()
            await self.s.refresh(sub)
        return sub

    async def delete(self, subscription_id: int) -> bool:
        async with guarded(self.s, "subscription.delete"):
            res = await self.s.execute(
                delete(Subscription).where(Subscription.id == subscription_id)
            )
            await self.s.commit()
        return bool(res.rowcount)

    async def list_active(self, now: datetime) -> List[Subscription]:
        # start_date <= today <= end_date, compared on whole UTC days
        today = day_start(utc_date(now))
        tomorrow = today + timedelta(days=1)
        async with guarded(self.s, "subscription.list_active"):
            q = await self.s.execute(
                select(Subscription)
                .where(Subscription.start_date < tomorrow)
                .where(Subscription.end_date >= today)
                .order_by(Subscription.id)
            )
            return list(q.scalars().all())

    async def list_by_user(self, user_id: int) -> List[Subscription]:
        async with guarded(self.s, "subscription.list_by_user"):
            q = await self.s.execute(
                select(Subscription)
                .where(Subscription.user_id == user_id)
                .order_by(Subscription.id)
            )
            return list(q.scalars().all())

    async def active_ids(self, now: datetime) -> List[int]:
        return [s.id for s in await self.list_active(now)]
