"""
UTC datetime utilities for consistent timezone handling.

All timestamps in the status ledger are timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes
    (SQLite and some drivers hand back naive values).

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """
    Whole seconds from start to end, floored and never negative.

    Both values are normalized to UTC first, so naive and aware inputs
    can be mixed. A clock that moved backwards yields 0.
    """
    start_utc = ensure_utc(start)
    end_utc = ensure_utc(end)
    if start_utc is None or end_utc is None:
        raise ValueError("elapsed_seconds requires two datetimes")
    delta = (end_utc - start_utc).total_seconds()
    if delta <= 0:
        return 0
    return int(delta)
