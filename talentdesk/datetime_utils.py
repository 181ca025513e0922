"""
Date utility functions for the application.

Dates cross the backend boundary as ISO-8601 strings (YYYY-MM-DD).
Internally every date is a calendar ``date``; time of day is dropped.
"""
from datetime import date, datetime

from talentdesk.errors import ErrorCode, ValidationError

ISO_DATE_FORMAT = "%Y-%m-%d"


def to_calendar_date(value):
    """
    Normalize a date-like value to a calendar day.

    Args:
        value: date, datetime, or ISO string (date or datetime form)

    Returns:
        date: The calendar day, with any time of day discarded

    Raises:
        ValidationError: If a string cannot be parsed
        TypeError: If the value is not date-like
    """
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_iso_date(value)
    raise TypeError(f"Expected a date, datetime or ISO string, got {type(value).__name__}")


def parse_iso_date(value):
    """
    Parse an ISO date string into a calendar date.

    Accepts plain 'YYYY-MM-DD' as well as full ISO datetimes
    ('2024-06-01T10:30:00Z'), in which case only the date part is kept.

    Raises:
        ValidationError: If the string is empty or malformed
    """
    if not value or not isinstance(value, str):
        raise ValidationError("Date is required", code=ErrorCode.INVALID_DATE_FORMAT)

    text = value.strip()
    try:
        if len(text) == 10:
            return datetime.strptime(text, ISO_DATE_FORMAT).date()
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(
            f"Invalid date '{value}'. Expected YYYY-MM-DD format.",
            code=ErrorCode.INVALID_DATE_FORMAT,
        )


def format_iso_date(value):
    """Format a date-like value as 'YYYY-MM-DD', or None if value is None."""
    if value is None:
        return None
    return to_calendar_date(value).strftime(ISO_DATE_FORMAT)


def format_display_date(value):
    """
    Format a date for display without zero padding.
    Returns format like: "6/1/2024"
    """
    day = to_calendar_date(value)
    return f"{day.month}/{day.day}/{day.year}"
