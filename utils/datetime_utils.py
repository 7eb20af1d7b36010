"""
Datetime utilities for stay dates and API timestamps.
Stay dates are calendar dates; the API expects absolute UTC timestamps.
"""

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

MS_PER_DAY = 24 * 60 * 60 * 1000


def local_today(tz_name: Optional[str] = None) -> date:
    """
    Get today's calendar date in the given timezone.

    Args:
        tz_name: IANA timezone name; the system local date is used if None

    Returns:
        Today's date (time of day discarded)
    """
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).date()
    return date.today()


def parse_stay_date(value: str) -> date:
    """
    Parse a guest-entered stay date.

    Accepts ISO ``YYYY-MM-DD`` and ``DD.MM.YYYY``.

    Raises:
        ValueError: If the string is not a recognised date
    """
    text = value.strip()
    for fmt in ("%Y-%m-%d", "%d.%m.%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date string: {value}")


def date_to_timestamp(value: date) -> datetime:
    """Midnight UTC of a calendar date."""
    return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)


def to_iso_timestamp(value: date) -> str:
    """
    Convert a stay date to the API's ISO-8601 timestamp format.

    ``date(2025, 6, 10)`` becomes ``"2025-06-10T00:00:00.000Z"``.
    """
    dt = date_to_timestamp(value)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def format_stay_date(value: Optional[date]) -> str:
    """Human readable stay date, ``-`` when unset."""
    if value is None:
        return "-"
    return value.strftime("%d.%m.%Y")
