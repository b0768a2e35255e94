from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from subsapi.domain.subscriptions import (
    is_active,
    remaining_days,
    validate_active_precondition,
    validate_window,
)
from subsapi.errors import InvalidInput, PreconditionFailed

from tests.conftest import utc

pytestmark = pytest.mark.unit


@dataclass
class Window:
    start_date: datetime
    end_date: datetime


JANUARY = Window(utc(2024, 1, 1), utc(2024, 1, 31))


def test_premium_january_scenario():
    now = utc(2024, 1, 15)
    assert is_active(JANUARY, now) is True
    assert remaining_days(JANUARY, now) == 16


@pytest.mark.parametrize(
    "now, expected",
    [
        (utc(2023, 12, 31, 23, 59), False),
        (utc(2024, 1, 1, 0, 0), True),
        (utc(2024, 1, 31, 23, 59, 59), True),
        (utc(2024, 2, 1, 0, 0), False),
    ],
)
def test_is_active_is_inclusive_on_whole_days(now, expected):
    assert is_active(JANUARY, now) is expected


def test_time_of_day_is_ignored():
    sub = Window(utc(2024, 1, 10, 18, 0), utc(2024, 1, 20, 6, 0))
    assert is_active(sub, utc(2024, 1, 10, 1, 0))
    assert is_active(sub, utc(2024, 1, 20, 23, 0))


def test_remaining_days_negative_after_end():
    assert remaining_days(JANUARY, utc(2024, 2, 10)) == -10


def test_remaining_days_zero_on_last_day():
    assert remaining_days(JANUARY, utc(2024, 1, 31, 22, 0)) == 0


def test_naive_datetimes_are_utc():
    sub = Window(datetime(2024, 1, 1), datetime(2024, 1, 31))
    assert remaining_days(sub, utc(2024, 1, 30)) == 1


def test_aware_non_utc_reference_is_converted():
    # 2024-02-01 01:00 at +03:00 is still January 31 in UTC
    plus3 = timezone(timedelta(hours=3))
    now = datetime(2024, 2, 1, 1, 0, tzinfo=plus3)
    assert is_active(JANUARY, now)
    assert remaining_days(JANUARY, now) == 0


def test_precondition_passes_on_empty_active_set():
    validate_active_precondition(12345, [])


def test_precondition_passes_when_target_active():
    validate_active_precondition(2, [1, 2, 3])


def test_precondition_rejects_when_target_missing_from_active_set():
    with pytest.raises(PreconditionFailed):
        validate_active_precondition(9, [1, 2])


def test_validate_window_rejects_inverted_dates():
    with pytest.raises(InvalidInput):
        validate_window(utc(2024, 2, 1), utc(2024, 1, 1), "basic")


def test_validate_window_rejects_blank_type():
    with pytest.raises(InvalidInput):
        validate_window(utc(2024, 1, 1), utc(2024, 1, 2), "   ")


def test_validate_window_allows_single_day():
    validate_window(utc(2024, 1, 1), utc(2024, 1, 1), "day-pass")
