"""Time helpers. Aggregation code takes a clock callable instead of reading the system time."""
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def frozen_clock(instant: datetime) -> Clock:
    """Clock that always returns ``instant``."""
    return lambda: instant


def to_day(value: Any) -> Optional[date]:
    """
    Calendar day (UTC) of a stored timestamp.

    Accepts datetimes (naive values are treated as UTC, which is how pymongo
    returns them), dates and ISO-8601 strings. Returns None for anything else.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    return None


def today(clock: Clock) -> date:
    return to_day(clock())
