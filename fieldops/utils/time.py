"""Time helpers."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Drop tzinfo after converting to UTC.

    SQLite hands back naive datetimes while freshly assigned attributes are
    aware, so arithmetic between the two goes through this first.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def minutes_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    """Whole minutes from ``start`` to ``end`` or None when either is missing."""
    if start is None or end is None:
        return None
    delta = as_naive_utc(end) - as_naive_utc(start)
    return int(delta.total_seconds() // 60)
