from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_timestamp() -> int:
    """Current unix time in whole seconds.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return int(time.time())


def local_date(timestamp: int, tz_name: str) -> date:
    return datetime.fromtimestamp(int(timestamp), tz=ZoneInfo(tz_name)).date()


def day_boundary(now: int, tz_name: str) -> int:
    """Start of "today" used by the auto sign-out policy.

    Today is the calendar date observed in ``tz_name``; its midnight is then
    read as a UTC instant. Event timestamps are compared against that value.
    """

    today = local_date(now, tz_name)
    midnight = datetime(today.year, today.month, today.day, tzinfo=timezone.utc)
    return int(midnight.timestamp())


def local_midnight(day: date, tz_name: str) -> int:
    """Unix time of 00:00 on ``day`` in ``tz_name``."""
    dt = datetime(day.year, day.month, day.day, tzinfo=ZoneInfo(tz_name))
    return int(dt.timestamp())


def local_day_span(start: date | None, end: date | None, tz_name: str) -> tuple[int | None, int | None]:
    """Half-open [from, to) timestamp range covering whole local days."""
    lo = local_midnight(start, tz_name) if start else None
    hi = local_midnight(end + timedelta(days=1), tz_name) if end else None
    return lo, hi


def format_timestamp(timestamp: int, tz_name: str) -> str:
    dt = datetime.fromtimestamp(int(timestamp), tz=ZoneInfo(tz_name))
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(seconds: int) -> str:
    """Render a duration as ``Dd HHh MMm SSs``; days are omitted under 24h."""

    seconds = max(int(seconds), 0)
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    clock = f"{hours:02d}h {minutes:02d}m {secs:02d}s"
    if days:
        return f"{days}d {clock}"
    return clock
