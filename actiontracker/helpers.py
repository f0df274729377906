# Action Tracker Helpers
# Utility functions used across all Action Tracker services

import math
import re
from datetime import date, datetime, timedelta

from .errors import InvalidInputError

ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
LEADING_NUMBER_PATTERN = re.compile(r'^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')


def split_table_ref(table_full):
    """Split a 'project.dataset.table' reference into its three parts."""
    parts = str(table_full or '').split('.')
    if len(parts) != 3 or not all(parts):
        raise InvalidInputError(f"table reference must be 'project.dataset.table', got {table_full!r}")
    return parts[0], parts[1], parts[2]


def parse_number(value):
    """Read a minutes-like value as a non-negative float.

    Strings are read up to the first non-numeric character ('30 min' -> 30.0).
    Anything unreadable, non-finite or negative counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = LEADING_NUMBER_PATTERN.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def parse_iso_date(value, name):
    """Parse a YYYY-MM-DD argument into a date.

    Args:
        value: date, datetime or ISO date string
        name: argument name used in the error message

    Raises:
        InvalidInputError: if the value is not an ISO calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and ISO_DATE_PATTERN.match(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise InvalidInputError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}")


def calendar_date(value):
    """Calendar date portion of a stored deadline, or None if it has none."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def date_range(start, end):
    """Every calendar day from start to end inclusive, ascending."""
    days = (end - start).days
    return [start + timedelta(days=offset) for offset in range(days + 1)]


def format_date_display(date_str):
    """Format date string to 'D MMM' format (e.g., '5 Jan')

    Args:
        date_str: Date string in various formats

    Returns:
        Formatted string or original if parsing fails
    """
    if not date_str:
        return ''
    for fmt in ['%Y-%m-%d', '%d/%m/%Y', '%d-%m-%Y']:
        try:
            date_obj = datetime.strptime(date_str, fmt)
            return f'{date_obj.day} {date_obj:%b}'
        except ValueError:
            continue
    return date_str


def normalize_label(text):
    """Lowercase and strip everything but letters and digits ('Sub-Type' -> 'subtype')."""
    return re.sub(r'[^a-z0-9]', '', str(text or '').lower())
