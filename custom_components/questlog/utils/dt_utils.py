# File: utils/dt_utils.py
"""Date and time utilities for Questlog.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.
Uses standard library datetime/zoneinfo plus dateutil for parsing.

Functions:
    - set_default_timezone
    - dt_now_utc: Current UTC datetime
    - dt_now_iso: Current UTC datetime as ISO string
    - as_utc / as_local: Timezone conversion
    - local_date: Calendar date of a datetime in the local timezone
    - dt_parse: Normalize str/datetime input to an aware UTC datetime
    - dt_parse_date: Parse an ISO date string
    - days_between: Whole calendar days between two dates
    - hours_to_timedelta: Convert an hours option to a timedelta
    - dt_format_duration: Human readable duration
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil import parser as dt_parser

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    Streak day boundaries are computed in this zone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string."""
    return dt_now_utc().isoformat()


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC, assuming the default timezone when naive."""
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone, assuming UTC when naive."""
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def local_date(dt_obj: datetime, tz: ZoneInfo | None = None) -> date:
    """Return the calendar date of a datetime in the local timezone.

    Example:
        2025-04-07T02:30:00+00:00 in America/New_York → date(2025, 4, 6)
    """
    return as_local(dt_obj, tz).date()


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse(dt_input: str | datetime | None) -> datetime | None:
    """Normalize a stored timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings (with or without offset) and datetime objects.
    Naive values are interpreted in the default timezone.

    Returns:
        UTC-aware datetime, or None when the input is empty or unparseable.
    """
    if not dt_input:
        return None

    if isinstance(dt_input, datetime):
        return as_utc(dt_input)

    if not isinstance(dt_input, str):
        return None

    try:
        result = dt_parser.isoparse(dt_input)
    except (ValueError, OverflowError):
        _LOGGER.debug("Could not parse datetime value '%s'", dt_input)
        return None

    return as_utc(result)


def dt_parse_date(date_input: str | date | None) -> date | None:
    """Parse a stored calendar date (YYYY-MM-DD).

    Full datetimes are accepted too and reduced to their local date.

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_input:
        return None

    if isinstance(date_input, datetime):
        return local_date(date_input)

    if isinstance(date_input, date):
        return date_input

    if not isinstance(date_input, str):
        return None

    try:
        return date.fromisoformat(date_input)
    except ValueError:
        pass

    parsed = dt_parse(date_input)
    if parsed is None:
        return None
    return local_date(parsed)


# ==============================================================================
# Arithmetic
# ==============================================================================


def days_between(earlier: date, later: date) -> int:
    """Return the number of whole calendar days from earlier to later.

    Examples:
        days_between(date(2025, 1, 1), date(2025, 1, 2)) → 1
        days_between(date(2025, 1, 3), date(2025, 1, 1)) → -2
    """
    return (later - earlier).days


def hours_to_timedelta(hours: float) -> timedelta:
    """Convert an hours value (possibly fractional) into a timedelta."""
    return timedelta(seconds=round(float(hours) * 3600))


def dt_format_duration(td: timedelta | None) -> str:
    """Format a timedelta as a compact human readable string.

    Examples:
        timedelta(hours=5, minutes=3) → "5h 3m"
        timedelta(seconds=20) → "0m"
        timedelta(0) → "0m"
    """
    if td is None or td.total_seconds() <= 0:
        return "0m"

    total_minutes = int(td.total_seconds() // 60)
    days, remainder = divmod(total_minutes, 60 * 24)
    hours, minutes = divmod(remainder, 60)

    parts: list[str] = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)
