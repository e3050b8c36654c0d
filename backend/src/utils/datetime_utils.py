"""
Datetime utilities for consistent timezone handling across the application.

Appointments are stored as absolute UTC instants, while schedules, breaks and
vacations are expressed in the company's local wall-clock time. These helpers
convert between the two and provide the minute-of-day arithmetic used by the
availability checks.
"""

import logging
import math
from datetime import datetime, timezone, timedelta, date, time
from typing import Optional, Union

from core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Get the current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in UTC.

    Stores without timezone support (SQLite) hand back naive values; those are
    written as UTC, so a naive datetime is interpreted as UTC.

    Args:
        dt: Datetime to normalize

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in YYYY-MM-DD or YYYY/MM/DD format.

    Single-digit months/days are accepted ("2025-1-6"). A trailing time part
    ("2025-01-06T00:00:00") is ignored so date-only columns serialized as
    timestamps still compare by calendar day.

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date string cannot be empty")

    date_str = date_str.strip().split("T")[0].split(" ")[0]

    if '/' in date_str:
        parts = date_str.split('/')
    elif '-' in date_str:
        parts = date_str.split('-')
    else:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}")

    if len(parts) != 3:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}")

    normalized = f"{parts[0].zfill(4)}-{parts[1].zfill(2)}-{parts[2].zfill(2)}"

    try:
        return datetime.strptime(normalized, '%Y-%m-%d').date()
    except ValueError as e:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}") from e


def parse_time_string(time_str: str) -> time:
    """
    Parse a time-of-day string in HH:MM format (seconds are tolerated).

    Raises:
        ValueError: If time string cannot be parsed
    """
    if not time_str or not str(time_str).strip():
        raise ValueError("Time string cannot be empty")

    parts = str(time_str).strip().split(':')
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time format (expected HH:MM): {time_str}")

    try:
        hour = int(parts[0])
        minute = int(parts[1])
        second = int(float(parts[2])) if len(parts) == 3 else 0
        return time(hour, minute, second)
    except ValueError as e:
        raise ValueError(f"Invalid time format (expected HH:MM): {time_str}") from e


def _coerce_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date_string(value)
    raise ValueError(f"Unsupported date value: {value!r}")


def _coerce_time(value: Union[str, time]) -> time:
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return parse_time_string(value)
    raise ValueError(f"Unsupported time value: {value!r}")


def _coerce_offset(value: Union[int, float, str, None]) -> float:
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid timezone offset: {value!r}")
    try:
        offset = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid timezone offset: {value!r}") from e
    if not math.isfinite(offset):
        raise ValueError(f"Invalid timezone offset: {value!r}")
    return offset


def to_absolute_instant(
    date_value: Union[str, date],
    time_value: Union[str, time],
    timezone_offset_minutes: Union[int, float, str, None]
) -> datetime:
    """
    Combine a local date and time-of-day into an absolute UTC instant.

    The offset follows the browser ``Date.getTimezoneOffset()`` convention the
    booking clients send: it is the number of minutes to ADD to local time to
    obtain UTC. A company in UTC-6 sends ``360``; one in UTC+2 sends ``-120``.

    Args:
        date_value: Local calendar date (``date`` or "YYYY-MM-DD")
        time_value: Local time of day (``time`` or "HH:MM")
        timezone_offset_minutes: Offset in minutes, positive west of UTC

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        InvalidInputError: If the date or time cannot be parsed, or the offset
            is not a finite number
    """
    try:
        local_date = _coerce_date(date_value)
        local_time = _coerce_time(time_value)
        offset = _coerce_offset(timezone_offset_minutes)
    except ValueError as e:
        logger.debug(f"Rejected local datetime {date_value!r} {time_value!r} offset={timezone_offset_minutes!r}: {e}")
        raise InvalidInputError("La fecha u hora no son validas.", details=str(e)) from e

    naive_local = datetime.combine(local_date, local_time)
    return (naive_local + timedelta(minutes=offset)).replace(tzinfo=timezone.utc)


def minutes_since_midnight(value: Union[str, time]) -> int:
    """
    Convert a time of day into total minutes since midnight.

    Args:
        value: ``time`` object or "HH:MM" string

    Raises:
        InvalidInputError: If the value cannot be parsed
    """
    try:
        parsed = _coerce_time(value)
    except ValueError as e:
        raise InvalidInputError("La hora no es valida.", details=str(e)) from e
    return parsed.hour * 60 + parsed.minute


def ranges_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """
    Check whether two half-open ranges overlap.

    Touching boundaries (one range ends exactly where the other starts) do not
    count as an overlap.
    """
    return start_a < end_b and start_b < end_a


def iso_weekday(value: date) -> int:
    """Weekday number used by schedules (1=Monday, ..., 7=Sunday)."""
    return value.isoweekday()
