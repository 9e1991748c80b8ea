"""
Time helpers.

Every component that reads the current time takes a ``clock`` callable
(default ``utc_now``) so tests can drive it with a fake clock.
"""
from datetime import date, datetime, timezone, tzinfo
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_date(dt: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar date of ``dt`` as seen in ``tz``."""
    return to_utc(dt).astimezone(tz).date()
