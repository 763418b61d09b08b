"""
Timestamp helpers with an explicit timezone.

Calendar periods (days, Monday-aligned weeks, hours) are always computed in a
timezone passed by the caller, never in the timezone of the running process,
so results are reproducible across machines.

Key behaviors:
- parse_timestamp never raises: unparseable input yields None
- Naive timestamps are read as wall-clock time in the caller's timezone
- start_of_day / end_of_day / start_of_week work on local wall-clock time
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DAY = timedelta(days=1)
END_OF_DAY = time(23, 59, 59, 999000)


def get_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValueError: if the name is unknown.
    """
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def parse_timestamp(value: object, tz: tzinfo = UTC) -> datetime | None:
    """
    Parse a store timestamp into an aware datetime.

    Accepts datetimes, dates and ISO-8601 strings (a trailing ``Z`` is read
    as UTC). Returns None for anything that cannot be parsed; callers treat
    that as "falls in no window".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt


def to_local(dt: datetime, tz: tzinfo) -> datetime:
    """Convert to the given timezone (naive input is read as wall-clock in tz)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def localize(day: date, tz: tzinfo, at: time = time.min) -> datetime:
    """Aware datetime for a calendar date and wall-clock time in tz."""
    return datetime.combine(day, at, tzinfo=tz)


def start_of_day(dt: datetime, tz: tzinfo) -> datetime:
    return localize(to_local(dt, tz).date(), tz)


def end_of_day(dt: datetime, tz: tzinfo) -> datetime:
    return localize(to_local(dt, tz).date(), tz, END_OF_DAY)


def monday_of(day: date) -> date:
    """Most recent Monday on or before the given date."""
    return day - timedelta(days=day.weekday())


def start_of_week(dt: datetime, tz: tzinfo) -> datetime:
    return localize(monday_of(to_local(dt, tz).date()), tz)


def add_days(dt: datetime, days: int, tz: tzinfo) -> datetime:
    """Calendar-day arithmetic that keeps the local wall-clock time."""
    local = to_local(dt, tz)
    shifted = local.date() + timedelta(days=days)
    return localize(shifted, tz, local.time())


def days_spanned(start: datetime, end: datetime) -> int:
    """Whole days covered by [start, end], rounding any partial day up."""
    return math.ceil((end - start) / DAY)
