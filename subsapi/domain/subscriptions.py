# subsapi/domain/subscriptions.py
"""
Date-window rules for subscriptions.

Everything here is pure: callers resolve the subscription and the reference
time first. Comparisons are date-truncated in UTC, so a subscription ending
on 2024-01-31 is still active at 23:59 that day.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol

from subsapi.errors import InvalidInput, PreconditionFailed
from subsapi.utils.dates import as_utc, utc_date


class DateWindow(Protocol):
    start_date: datetime
    end_date: datetime


def is_active(subscription: DateWindow, now: datetime) -> bool:
    today = utc_date(now)
    return utc_date(subscription.start_date) <= today <= utc_date(subscription.end_date)


def remaining_days(subscription: DateWindow, now: datetime) -> int:
    """Whole days until ``end_date``; negative once the subscription has ended."""
    return (utc_date(subscription.end_date) - utc_date(now)).days


def validate_active_precondition(subscription_id: int, active_ids: Iterable[int]) -> None:
    """
    Reject when some subscription is active but the target is not among them.

    An empty active set never blocks: existence of the target is checked
    separately by the caller.
    """
    active = set(active_ids)
    if active and subscription_id not in active:
        raise PreconditionFailed("Subscription not active")


def validate_window(start_date: datetime, end_date: datetime, subscription_type: str) -> None:
    if not subscription_type or not subscription_type.strip():
        raise InvalidInput("subscriptionType must not be empty")
    if as_utc(start_date) > as_utc(end_date):
        raise InvalidInput("startDate must not be after endDate")
