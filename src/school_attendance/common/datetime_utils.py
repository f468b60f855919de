from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

DateLike = Union[date, datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse a date or a full ISO-8601 datetime; a bare date means midnight."""
    value = value.strip()
    if len(value) == 10:
        return datetime.combine(parse_iso_date(value), time.min)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    # Single server-local day boundary: drop any offset after converting.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(as_datetime(value).date(), time.min)


def end_of_day(value: DateLike) -> datetime:
    """Last millisecond of the calendar day (23:59:59.999)."""
    return datetime.combine(as_datetime(value).date(), time(23, 59, 59, 999000))


def day_bounds(value: DateLike) -> tuple[datetime, datetime]:
    return start_of_day(value), end_of_day(value)


def next_day_start(value: DateLike) -> datetime:
    return start_of_day(value) + timedelta(days=1)
