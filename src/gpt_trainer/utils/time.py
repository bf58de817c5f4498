"""Timestamp formatting and parsing utilities.

The GPT Trainer API exchanges timestamps as ``YYYY-MM-DD HH:MM:SS`` strings
in UTC; ISO 8601 strings are accepted on input as well.
"""

from datetime import datetime, timedelta, timezone

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime in the API's timestamp format.

    Args:
        dt: Datetime to format. Naive values are treated as UTC.

    Returns:
        String like "2024-12-19 14:30:00".
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(TIMESTAMP_FORMAT)


def timestamp_ago(days: int = 0, hours: int = 0) -> str:
    """Timestamp relative to now, used for realistic fixture data.

    Args:
        days: Days before now.
        hours: Hours before now.

    Returns:
        Formatted timestamp string.
    """
    return format_timestamp(utc_now() - timedelta(days=days, hours=hours))


def parse_timestamp(value: str) -> datetime:
    """Parse an API or ISO 8601 timestamp to a UTC datetime.

    Handles "2024-01-15 10:30:00", "2024-01-15T10:30:00Z" and offsets.

    Args:
        value: Timestamp string.

    Returns:
        Timezone-aware datetime object.

    Raises:
        ValueError: If the string is not a recognised timestamp.
    """
    value = value.strip().replace("Z", "+00:00")
    if "T" not in value and " " in value:
        value = value.replace(" ", "T", 1)
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


__all__ = [
    "TIMESTAMP_FORMAT",
    "utc_now",
    "format_timestamp",
    "timestamp_ago",
    "parse_timestamp",
]
