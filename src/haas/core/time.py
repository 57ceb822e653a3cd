"""
Time parsing and timezone normalization.

Punch timestamps are always timezone-aware. Venues operate in JST, so naive input is
interpreted in the configured application timezone rather than in server-local time.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone as dt_timezone
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Accepts a trailing `Z` (UTC). If the parsed value is naive, `timezone` is attached.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_tz(dt, timezone)


def now_in(timezone: str) -> datetime:
    """Current time as an aware datetime in `timezone`."""
    return datetime.now(ZoneInfo(timezone))


def end_of_day_utc(day: date) -> datetime:
    """Last whole second of `day` in UTC (23:59:59Z)."""
    return datetime.combine(day, time(23, 59, 59), tzinfo=dt_timezone.utc)
