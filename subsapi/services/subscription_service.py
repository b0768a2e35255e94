# subsapi/services/subscription_service.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from subsapi.domain import subscriptions as domain
from subsapi.errors import InvalidInput, NotFound
from subsapi.models.subscription import Subscription
from subsapi.repositories.subscription_repo import SubscriptionRepo
from subsapi.repositories.user_repo import UserRepo
from subsapi.services.auth_service import Identity
from subsapi.services.retry import RetryingExecutor
from subsapi.utils.dates import now_utc

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionInput:
    start_date: datetime
    end_date: datetime
    subscription_type: str
    user_id: Optional[int] = None


def _require_positive(value: Optional[int], name: str) -> int:
    if value is None or value <= 0:
        raise InvalidInput(f"Invalid {name} provided.")
    return value


class SubscriptionService:
    """
    Subscription use cases. Each one validates its input, checks
    preconditions, then runs the store call through the retrying executor and
    unwraps the outcome (raising the caller-facing error on failure).
    """

    def __init__(
        self,
        subs: SubscriptionRepo,
        users: UserRepo,
        executor: RetryingExecutor,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.subs = subs
        self.users = users
        self.executor = executor
        self.clock = clock

    async def get_by_user(
        self, user_id: Optional[int], *, cancel_event: asyncio.Event | None = None
    ) -> List[Subscription]:
        user_id = _require_positive(user_id, "userId")
        logger.info("get subscriptions for user_id=%s", user_id, extra={"user_id": user_id})
        outcome = await self.executor.execute(
            lambda: self.subs.list_by_user(user_id),
            name="subscriptions.by_user",
            cancel_event=cancel_event,
        )
        return outcome.unwrap()

    async def get_active(self, *, cancel_event: asyncio.Event | None = None) -> List[Subscription]:
        now = self.clock()
        outcome = await self.executor.execute(
            lambda: self.subs.list_active(now),
            name="subscriptions.active",
            cancel_event=cancel_event,
        )
        return outcome.unwrap()

    async def remaining_days(
        self, subscription_id: Optional[int], *, cancel_event: asyncio.Event | None = None
    ) -> int:
        subscription_id = _require_positive(subscription_id, "subscriptionId")
        now = self.clock()

        async def _op() -> int:
            active_ids = await self.subs.active_ids(now)
            domain.validate_active_precondition(subscription_id, active_ids)
            sub = await self.subs.get(subscription_id)
            if sub is None:
                # reported as a bad request, same as an inactive subscription
                raise InvalidInput("Subscription not found")
            return domain.remaining_days(sub, now)

        outcome = await self.executor.execute(
            _op, name="subscriptions.remaining_days", cancel_event=cancel_event
        )
        days = outcome.unwrap()
        logger.info(
            "remaining days subscription_id=%s days=%s",
            subscription_id,
            days,
            extra={"subscription_id": subscription_id},
        )
        return days

    async def create(
        self,
        identity: Optional[Identity],
        data: Optional[SubscriptionInput],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Subscription:
        if data is None:
            raise InvalidInput("Invalid subscription data provided.")
        owner_id = _require_positive(identity.user_id if identity else None, "userId")
        domain.validate_window(data.start_date, data.end_date, data.subscription_type)

        outcome = await self.executor.execute(
            lambda: self.subs.create(
                user_id=owner_id,
                start_date=data.start_date,
                end_date=data.end_date,
                subscription_type=data.subscription_type.strip(),
            ),
            name="subscriptions.create",
            cancel_event=cancel_event,
        )
        sub = outcome.unwrap()
        logger.info(
            "subscription created id=%s owner=%s",
            sub.id,
            owner_id,
            extra={"subscription_id": sub.id, "user_id": owner_id},
        )
        return sub

    async def update(
        self,
        subscription_id: Optional[int],
        data: Optional[SubscriptionInput],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> Subscription:
        if data is None:
            raise InvalidInput("Invalid subscriptionId or subscription data provided.")
        subscription_id = _require_positive(subscription_id, "subscriptionId")
        new_owner = _require_positive(data.user_id, "userId")
        domain.validate_window(data.start_date, data.end_date, data.subscription_type)

        async def _op() -> Subscription:
            if await self.users.get(new_owner) is None:
                raise InvalidInput("User not found")
            sub = await self.subs.replace(
                subscription_id,
                user_id=new_owner,
                start_date=data.start_date,
                end_date=data.end_date,
                subscription_type=data.subscription_type.strip(),
            )
            if sub is None:
                raise NotFound("Subscription not found")
            return sub

        outcome = await self.executor.execute(
            _op, name="subscriptions.update", cancel_event=cancel_event
        )
        sub = outcome.unwrap()
        logger.info("subscription updated id=%s", subscription_id, extra={"subscription_id": subscription_id})
        return sub

    async def delete(
        self, subscription_id: Optional[int], *, cancel_event: asyncio.Event | None = None
    ) -> None:
        subscription_id = _require_positive(subscription_id, "subscriptionId")

        async def _op() -> None:
            if not await self.subs.delete(subscription_id):
                raise NotFound("Subscription not found")

        outcome = await self.executor.execute(
            _op, name="subscriptions.delete", cancel_event=cancel_event
        )
        outcome.unwrap()
        logger.info("subscription deleted id=%s", subscription_id, extra={"subscription_id": subscription_id})
