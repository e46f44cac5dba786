"""Date parsing utilities."""

import re
from datetime import date, datetime, time, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
DAYS_AGO_PATTERN = re.compile(r"^(\d+)\s+days?\s+ago$")


def _relative_date(date_str: str, today: date) -> date | None:
    """Resolve relative expressions such as 'yesterday' or '3 days ago'."""
    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    match = DAYS_AGO_PATTERN.match(date_str)
    if match:
        return today - timedelta(days=int(match.group(1)))

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "week":
            return today - timedelta(days=7)
        elif period == "month":
            return today - relativedelta(months=1)
        elif period == "year":
            return today - relativedelta(years=1)
        elif period in WEEKDAYS:
            # Last Monday, etc.
            days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7
            if days_ago == 0:
                days_ago = 7
            return today - timedelta(days=days_ago)

    return None


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "3 days ago", "last friday",
      "last month" (same day one month back), etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    relative = _relative_date(date_str, date.today())
    if relative is not None:
        return relative

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_timestamp(timestamp_str: str) -> datetime:
    """Parse a trade timestamp.

    "now" gives the current time and relative dates give midnight of that day.
    Absolute values may carry a time ("2024-01-15 14:30"); timezone-aware
    values are converted to naive local time.

    Raises:
        ValueError: If the string cannot be parsed
    """
    normalized = timestamp_str.strip().lower()
    if normalized == "now":
        return datetime.now()

    relative = _relative_date(normalized, date.today())
    if relative is not None:
        return datetime.combine(relative, time())

    try:
        dt = date_parser.parse(normalized)
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse timestamp '{timestamp_str}': {e}")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt
