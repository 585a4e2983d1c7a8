"""
Standardized Date/Time Handling Utilities

Streaks, daily logins and quest due dates all work on calendar days. A
command's ``now`` is turned into a calendar day in one place so every
component agrees on what "today" means.

RULES:
- Timestamps kept on records are timezone-aware UTC
- Calendar days are taken in APP_TIMEZONE
- Naive datetimes are assumed to already be UTC
"""

import logging
from datetime import datetime, date, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lifequest import config

logger = logging.getLogger(__name__)

# Fallback if APP_TIMEZONE is not a known zone
DEFAULT_TIMEZONE = "UTC"


def get_app_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Resolve the timezone used for calendar days

    Args:
        tz_name: IANA zone name (defaults to APP_TIMEZONE)

    Returns:
        ZoneInfo object
    """
    tz_name = tz_name or config.APP_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid timezone '{tz_name}': {e}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def now_utc() -> datetime:
    """Current datetime in UTC (timezone-aware)"""
    return datetime.now(ZoneInfo("UTC"))


def to_utc(dt: datetime) -> datetime:
    """Timezone-aware UTC copy of dt; naive input is taken as UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.astimezone(ZoneInfo("UTC"))


def local_date(dt: datetime, tz_name: Optional[str] = None) -> date:
    """
    Calendar day of dt in the app timezone

    Args:
        dt: Any datetime (naive is taken as UTC)
        tz_name: Override for APP_TIMEZONE

    Returns:
        The local calendar date
    """
    return to_utc(dt).astimezone(get_app_timezone(tz_name)).date()


def local_midnight_utc(day: date, tz_name: Optional[str] = None) -> datetime:
    """Start of a local calendar day, as a UTC timestamp"""
    return to_utc(datetime.combine(day, time.min, tzinfo=get_app_timezone(tz_name)))
