"""Reference-day helpers.

Daily totals are bucketed by the calendar day in one fixed time zone so that
"today" does not move with the client's location.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app

FALLBACK_TIMEZONE = "America/New_York"


def reference_zone(name: Optional[str] = None) -> ZoneInfo:
    tz_name = name or current_app.config.get("REFERENCE_TIMEZONE") or FALLBACK_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        current_app.logger.warning(f"Unknown REFERENCE_TIMEZONE {tz_name!r}, using {FALLBACK_TIMEZONE}")
        return ZoneInfo(FALLBACK_TIMEZONE)


def reference_today(tz: ZoneInfo, now: Optional[datetime] = None) -> date:
    now = now or datetime.now(tz)
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(tz).date()


def resolve_day(value: Optional[datetime], tz: ZoneInfo) -> date:
    """Day a request refers to: the supplied timestamp seen in ``tz``, else today."""
    if value is None:
        return reference_today(tz)
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(tz).date()


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
