# visitor_register/utils/clock.py
"""
Time helpers. All timestamps are stored and compared in UTC; a named
timezone is only used to decide which calendar day "today" is.
"""

import math
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; they were written as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_timezone(name: str):
    if not name:
        raise ValueError("Timezone name must not be empty")
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def day_bounds(now: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """Return the UTC [start, end) of the calendar day containing `now` in tz_name."""
    tz = resolve_timezone(tz_name)
    local = as_utc(now).astimezone(tz)
    start_local = datetime(local.year, local.month, local.day, tzinfo=tz)
    end_local = start_local + timedelta(days=1)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def round_half_up(value: float) -> int:
    """0.5 rounds away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))
