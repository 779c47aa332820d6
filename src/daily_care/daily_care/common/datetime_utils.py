from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def as_day(value: date | datetime) -> date:
    """Drop the time-of-day part, keeping the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def day_bounds(start: date | datetime, end: date | datetime | None = None) -> tuple[datetime, datetime]:
    """Inclusive [start 00:00:00, end 23:59:59] bounds in the stored timezone."""
    first = as_day(start)
    last = as_day(end) if end is not None else first
    return (
        datetime.combine(first, time(0, 0, 0)),
        datetime.combine(last, time(23, 59, 59)),
    )


def parse_clock(value: Any) -> Optional[time]:
    """Read a time-of-day from the shapes found in stored records.

    Accepts datetime.time, datetime.datetime, timedelta (MySQL TIME) and
    strings like '9:5', '09:05' or '09:05:00'. Seconds are dropped.
    Returns None for empty or unparsable values.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return time(value.hour, value.minute)
    if isinstance(value, time):
        return time(value.hour, value.minute)
    if isinstance(value, timedelta):
        total_minutes = (int(value.total_seconds()) % 86400) // 60
        return time(total_minutes // 60, total_minutes % 60)
    if isinstance(value, str):
        m = _CLOCK_RE.match(value.strip())
        if not m:
            return None
        hours, minutes = int(m.group(1)), int(m.group(2))
        if hours > 23 or minutes > 59:
            return None
        return time(hours, minutes)
    return None
