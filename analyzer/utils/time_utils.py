"""
Time parsing and manipulation utilities for the EV log analyzer.

Rows carry their timestamp as integer epoch milliseconds; trips and charging
sessions carry ISO-8601 UTC strings. This module converts between the two
and derives the calendar keys used for bucketing:
- Multiple input format support (ISO, common date formats, Unix timestamp)
- UTC normalization of naive datetimes
- Month/day keys and weekday names in UTC
- Hour of day in local time
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from dateutil import parser as date_parser

from ..calculations.constants import MILLIS_PER_DAY, MILLIS_PER_MINUTE
from ..models import WEEKDAY_ABBREVIATIONS

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)


def parse_datetime(
    date_string: str,
    default: Optional[datetime] = None,
    assume_utc: bool = True
) -> Optional[datetime]:
    """
    Parse a date/time string into a datetime object.

    Supports multiple formats:
    - ISO 8601: "2024-01-15T14:30:00Z"
    - Date and time: "2024-01-15 14:30:00"
    - Unix timestamp in seconds or milliseconds: "1705329000"

    Args:
        date_string: The date/time string to parse
        default: Value to return if parsing fails (default: None)
        assume_utc: If True and no timezone in string, assume UTC (default: True)

    Returns:
        datetime object or default value if parsing fails

    Example:
        >>> parse_datetime("2024-01-15")
        datetime.datetime(2024, 1, 15, 0, 0, tzinfo=datetime.timezone.utc)
        >>> parse_datetime("invalid") is None
        True
    """
    if date_string is None:
        return default

    date_string = str(date_string).strip()
    if not date_string:
        return default

    # Try Unix timestamp first
    try:
        timestamp = float(date_string)
    except ValueError:
        timestamp = None

    if timestamp is not None:
        if not math.isfinite(timestamp):
            return default
        if timestamp > 1e12:  # Milliseconds
            timestamp = timestamp / 1000
        try:
            return datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return default

    try:
        dt = date_parser.parse(date_string)
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"Could not parse timestamp: {date_string}")
        return default

    if dt.tzinfo is None and assume_utc:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch_millis(dt: datetime) -> int:
    """Epoch milliseconds of a datetime; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // ONE_MILLISECOND


def parse_epoch_millis(value) -> Optional[int]:
    """Parse a raw date value straight to epoch milliseconds (None if invalid)."""
    dt = parse_datetime(value)
    if dt is None:
        return None
    return to_epoch_millis(dt)


def utc_datetime(epoch_millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=epoch_millis)


def iso_from_millis(epoch_millis: int) -> str:
    """
    Format epoch milliseconds as an ISO-8601 UTC string.

    Example:
        >>> iso_from_millis(0)
        '1970-01-01T00:00:00.000Z'
    """
    dt = utc_datetime(epoch_millis)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{dt.microsecond // 1000:03d}Z"


def millis_from_iso(value: str) -> int:
    """Parse an ISO string produced by iso_from_millis back to epoch milliseconds."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return to_epoch_millis(dt)


def month_key(epoch_millis: int) -> str:
    """UTC "YYYY-MM" bucket key."""
    return utc_datetime(epoch_millis).strftime('%Y-%m')


def day_key(epoch_millis: int) -> str:
    """UTC "YYYY-MM-DD" bucket key."""
    return utc_datetime(epoch_millis).strftime('%Y-%m-%d')


def utc_weekday_abbrev(epoch_millis: int) -> str:
    """Three-letter weekday name of the UTC calendar day."""
    # isoweekday: Mon=1 .. Sun=7, abbreviations start at Sun
    return WEEKDAY_ABBREVIATIONS[utc_datetime(epoch_millis).isoweekday() % 7]


def local_hour(epoch_millis: int, tz=None) -> int:
    """Hour of day in the local timezone (or ``tz`` when given)."""
    return datetime.fromtimestamp(epoch_millis / 1000, tz=tz).hour


def minutes_between(start_millis: int, end_millis: int) -> float:
    return (end_millis - start_millis) / MILLIS_PER_MINUTE


def whole_days_rounded(start_millis: int, end_millis: int) -> int:
    """Elapsed days rounded half up, like a calendar-agnostic day count."""
    return int(math.floor((end_millis - start_millis) / MILLIS_PER_DAY + 0.5))


def whole_days_ceil(start_millis: int, end_millis: int) -> int:
    return int(math.ceil((end_millis - start_millis) / MILLIS_PER_DAY))


def month_window(month: str) -> Tuple[datetime, datetime]:
    """
    Inclusive UTC window covering a "YYYY-MM" month.

    Example:
        >>> start, end = month_window("2024-02")
        >>> end.isoformat()
        '2024-02-29T23:59:59.999000+00:00'
    """
    year, month_number = (int(part) for part in month.split('-'))
    start = datetime(year, month_number, 1, tzinfo=timezone.utc)
    if month_number == 12:
        next_month = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        next_month = datetime(year, month_number + 1, 1, tzinfo=timezone.utc)
    return start, next_month - ONE_MILLISECOND


def day_window(day: str) -> Tuple[datetime, datetime]:
    """Inclusive UTC window covering a "YYYY-MM-DD" day."""
    start = datetime.strptime(day, '%Y-%m-%d').replace(tzinfo=timezone.utc)
    return start, start + timedelta(days=1) - ONE_MILLISECOND
