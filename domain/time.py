"""
Domain time utilities (pure).

Centralized timestamp validation and day-granularity helpers.

Behavior and error messages must remain consistent across the domain model.
Dashboard and enrollment rules compare calendar days only; time of day is
always discarded before comparison.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Union

DayLike = Union[date, datetime]


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def as_day(value: DayLike) -> date:
    """Reduce a date or datetime to its calendar day."""

    # datetime is a subclass of date, so check it first.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Unsupported day type: {type(value)!r}")


def parse_day(value: Any) -> date:
    """
    Parse a Supabase date column into a `date`.

    Accepts `YYYY-MM-DD` strings, full ISO-8601 timestamps (the date part is
    kept), and date/datetime instances.
    """

    if isinstance(value, (date, datetime)):
        return as_day(value)
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return as_day(parse_utc_datetime(text))
    raise TypeError(f"Unsupported date type: {type(value)!r}")


def parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    Naive values are assumed to already be UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def utc_today() -> date:
    """Current calendar day in UTC."""

    return datetime.now(timezone.utc).date()
