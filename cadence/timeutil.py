"""Clock, timestamp parsing, and duration formatting helpers for Cadence.

Everything here is pure apart from ``now_local``. Timestamps are aware
datetimes on the local clock; ISO strings are accepted wherever a timestamp
is, and naive values are read as local time.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta


def now_local() -> datetime:
    """Current local time, aware, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def resolve_now(now: datetime | str | None = None) -> datetime:
    """The clock reading for one engine call: *now* truncated to whole seconds, or the local clock."""
    if now is None:
        return now_local()
    return parse_timestamp(now).replace(microsecond=0)


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime) as an aware datetime."""
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value).strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def format_timestamp(dt: datetime) -> str:
    return parse_timestamp(dt).isoformat(timespec="seconds")


def add_minutes(dt: datetime, minutes: int) -> datetime:
    return dt + timedelta(minutes=minutes)


def seconds_between(start: datetime | str, end: datetime | str) -> int:
    """Whole seconds from *start* to *end*, never negative."""
    delta = (parse_timestamp(end) - parse_timestamp(start)).total_seconds()
    return max(0, math.floor(delta))


def minutes_between(start: datetime | str, end: datetime | str) -> int:
    """Whole minutes from *start* to *end*, never negative."""
    delta = (parse_timestamp(end) - parse_timestamp(start)).total_seconds()
    return max(0, math.floor(delta / 60))


def to_local(dt: datetime | str) -> datetime:
    """*dt* converted to the local clock, whatever offset it carried."""
    return parse_timestamp(dt).astimezone()


def start_of_day(dt: datetime | str) -> datetime:
    """Local midnight of the local day containing *dt*.

    The offset is looked up for midnight itself, so on a DST change day it can
    differ from the offset of *dt*.
    """
    d = to_local(dt)
    return datetime(d.year, d.month, d.day).astimezone()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity."""
    return math.floor(value + 0.5)


def format_duration(seconds: float) -> str:
    """Format seconds as '1h 5m', '5m 30s' or '30s' (first non-zero tier wins)."""
    total = max(0, math.floor(seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    remaining = total % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{remaining}s"


def format_relative_due(due_at: datetime | str, now: datetime | None = None) -> str:
    """Describe a due time relative to *now*: 'now', 'in 1h 5m' or '20m overdue'."""
    if now is None:
        now = now_local()
    diff_seconds = (parse_timestamp(due_at) - parse_timestamp(now)).total_seconds()
    abs_minutes = abs(round_half_up(diff_seconds / 60))

    if abs_minutes < 1:
        return "now"

    hours = abs_minutes // 60
    minutes = abs_minutes % 60
    label = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"

    return f"{label} overdue" if diff_seconds < 0 else f"in {label}"


def format_clock(dt: datetime | str) -> str:
    """Local wall-clock time of *dt* as HH:MM."""
    return to_local(dt).strftime("%H:%M")
