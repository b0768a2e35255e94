from datetime import date, datetime, timezone

UTC = timezone.utc


def now_utc() -> datetime:
    return datetime.now(tz=UTC)


def as_utc(dt: datetime) -> datetime:
    """Naive values are taken to be UTC already; aware ones are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_date(dt: datetime) -> date:
    return as_utc(dt).date()


def day_start(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=UTC)
