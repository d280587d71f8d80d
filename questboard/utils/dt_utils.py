# File: utils/dt_utils.py
"""Date and time utilities for Quest Board.

Pure Python date/time functions with no package-internal imports.
Uses standard library: datetime, zoneinfo; third party: dateutil.

All "local" values are computed in DEFAULT_TIME_ZONE unless a tz is passed.
Naive datetimes handed in by callers are read as local wall-clock time.

Functions:
    - set_default_timezone / get_default_timezone
    - dt_now_local: Current datetime in local timezone
    - dt_today_local: Today's date in local timezone
    - as_local: Attach or convert a datetime to local timezone
    - dt_to_iso / dt_parse: ISO datetime round trip
    - dt_parse_date: Parse a YYYY-MM-DD key
    - date_key: Local calendar key for a date or datetime
    - dt_to_epoch_ms: Epoch milliseconds for createdAt stamps
    - dt_add_days: Calendar-day arithmetic
    - dates_between: Dates strictly between two dates
    - start_of_week: Monday on or before a date
    - parse_time_to_minutes: HH:MM to minutes after midnight, clamped
    - minutes_of_day: Minutes after local midnight for a datetime
    - dt_at_minutes: Local datetime for a date plus minutes after midnight
    - format_time_remaining: "Ends in 2d 3h" style countdown text
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import MO, relativedelta

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

MINUTES_PER_DAY = 1440
# Used when an HH:MM value is missing entirely
FALLBACK_TIME_MINUTES = 8 * 60


# ==============================================================================
# Timezone configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once at startup with the player's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    return datetime.now(tz or DEFAULT_TIME_ZONE)


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone."""
    return dt_now_local(tz).date()


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Return dt_obj in local timezone.

    Naive datetimes are taken to already be local wall-clock time.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=tz_info)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing / Formatting
# ==============================================================================


def dt_to_iso(dt_obj: datetime) -> str:
    """Serialize a datetime as an ISO 8601 UTC string."""
    return as_local(dt_obj).astimezone(UTC).isoformat()


def dt_parse(value: str | float | datetime | None) -> datetime | None:
    """Parse an ISO string (or epoch milliseconds) into an aware local datetime.

    Returns None for empty or unparseable input.

    Examples:
        dt_parse("2026-01-18T12:30:00+00:00") → aware datetime
        dt_parse(1768739400000) → aware datetime
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return as_local(value)
    if isinstance(value, (int, float)):
        try:
            return as_local(datetime.fromtimestamp(value / 1000, tz=UTC))
        except (OverflowError, OSError, ValueError):
            _LOGGER.warning("Out of range timestamp: %s", value)
            return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        _LOGGER.warning("Unparseable datetime value: %s", value)
        return None
    return as_local(parsed)


def dt_parse_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD key (ignores anything that is not a plain date)."""
    text = str(value or "")
    if len(text) != 10:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def date_key(value: date | datetime) -> str:
    """Return the local calendar key "YYYY-MM-DD" for a date or datetime."""
    if isinstance(value, datetime):
        return as_local(value).date().isoformat()
    return value.isoformat()


def dt_to_epoch_ms(dt_obj: datetime) -> int:
    """Return epoch milliseconds for a datetime."""
    return int(as_local(dt_obj).timestamp() * 1000)


# ==============================================================================
# Calendar arithmetic
# ==============================================================================


def dt_add_days(value: date, days: int) -> date:
    """Add (or subtract) whole calendar days."""
    return value + relativedelta(days=days)


def dates_between(start: date, end: date) -> list[date]:
    """Return every date strictly between start and end, oldest first."""
    result: list[date] = []
    current = dt_add_days(start, 1)
    while current < end:
        result.append(current)
        current = dt_add_days(current, 1)
    return result


def start_of_week(value: date) -> date:
    """Return the Monday on or before value."""
    return value + relativedelta(weekday=MO(-1))


# ==============================================================================
# Clock times
# ==============================================================================


def parse_time_to_minutes(
    value: str | None, default: int = FALLBACK_TIME_MINUTES
) -> int:
    """Convert "HH:MM" to minutes after midnight.

    Hours are clamped to 0-23 and minutes to 0-59. A missing value returns
    default; a missing or unreadable component counts as 0.

    Examples:
        parse_time_to_minutes("07:30") → 450
        parse_time_to_minutes("25:99") → 1439
        parse_time_to_minutes(None) → 480
    """
    if not value or not isinstance(value, str):
        return default
    parts = value.split(":")
    hours = _component(parts[0] if parts else "", 23)
    minutes = _component(parts[1] if len(parts) > 1 else "", 59)
    return hours * 60 + minutes


def _component(raw: str, upper: int) -> int:
    try:
        number = int(float(raw.strip() or 0))
    except ValueError:
        return 0
    return max(0, min(upper, number))


def minutes_of_day(dt_obj: datetime) -> int:
    """Return minutes after local midnight."""
    local = as_local(dt_obj)
    return local.hour * 60 + local.minute


def dt_at_minutes(value: date, minutes: int, tz: ZoneInfo | None = None) -> datetime:
    """Return the local datetime at a given minute-of-day on a calendar date."""
    minutes = minutes % MINUTES_PER_DAY
    return datetime.combine(
        value, time(minutes // 60, minutes % 60), tzinfo=tz or DEFAULT_TIME_ZONE
    )


# ==============================================================================
# Countdown text
# ==============================================================================


def format_time_remaining(now: datetime, end: datetime, label: str) -> str:
    """Format the time left until end as compact countdown text.

    Shows days and hours when at least a day remains, hours and minutes when
    at least an hour remains, otherwise minutes only. Past ends read as 0m.

    Examples:
        format_time_remaining(now, now + 2d 3h, "Ends in") → "Ends in 2d 3h"
        format_time_remaining(now, now + 1h 5m, "Resets in") → "Resets in 1h 5m"
    """
    remaining = max(timedelta(0), end - now)
    total_minutes = int(remaining.total_seconds() // 60)
    total_hours = total_minutes // 60
    days, hours = divmod(total_hours, 24)
    minutes = total_minutes % 60
    if days > 0:
        return f"{label} {days}d {hours}h"
    if hours > 0:
        return f"{label} {hours}h {minutes}m"
    return f"{label} {minutes}m"
