"""Date parsing utilities."""

from datetime import datetime, UTC
from dateutil import parser as date_parser


def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime.

    Naive UTC is what SQLite hands back for DateTime columns, so every
    timestamp the import pipeline compares is kept in that form.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def parse_datetime(date_str: str) -> datetime:
    """Parse a processor timestamp such as "2025-10-01 14:23:05" or ISO 8601.

    Args:
        date_str: Date or datetime string in any format dateutil understands

    Returns:
        Naive UTC datetime (date-only input yields midnight)

    Raises:
        ValueError: If the string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise ValueError("Empty date string")

    try:
        parsed = date_parser.parse(str(date_str).strip())
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
    return to_naive_utc(parsed)
