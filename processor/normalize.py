"""Slug, date and time normalization for event records."""
import re
from datetime import datetime, timezone

from processor.errors import InvalidDateError, InvalidTimeError, TimeOutOfRangeError

_SLUG_INVALID_CHARS = re.compile(r'[^a-z0-9\s-]')
_SLUG_WHITESPACE = re.compile(r'\s+')
_SLUG_HYPHENS = re.compile(r'-+')

TIME_PATTERN = re.compile(r'^([0-9]{1,2})(?::([0-9]{2}))?\s*(AM|PM|am|pm)?$')

# Date, optional time and optional UTC offset; fractions of 3 or 6 digits
ISO_PATTERN = re.compile(
    r'^[0-9]{4}-[0-9]{2}-[0-9]{2}'
    r'(?:[T ][0-9]{2}:[0-9]{2}(?::[0-9]{2}(?:\.(?:[0-9]{6}|[0-9]{3}))?)?'
    r'(?:[+-][0-9]{2}:[0-9]{2})?)?$'
)

# Tried in order after ISO 8601
DATE_FORMATS = [
    '%m/%d/%Y',      # US format
    '%m-%d-%Y',      # US format with dashes
    '%Y/%m/%d',      # Alternative ISO format
    '%d/%m/%Y',      # European format
    '%B %d, %Y',     # Full month name
    '%b %d, %Y',     # Abbreviated month name
    '%B %d %Y',
    '%b %d %Y',
    '%d %B %Y',
    '%d %b %Y',
    '%a, %d %b %Y',
    '%a %b %d %Y',
]


def slugify(title: str) -> str:
    """
    Build a URL-safe slug from a title.

    Characters outside [a-z0-9], whitespace and hyphens are dropped. A title
    made only of dropped characters yields an empty string.

    Args:
        title: Event title

    Returns:
        Lowercase, hyphen-delimited slug
    """
    slug = str(title).strip().lower()
    slug = _SLUG_INVALID_CHARS.sub('', slug)
    slug = _SLUG_WHITESPACE.sub('-', slug)
    slug = _SLUG_HYPHENS.sub('-', slug)
    return slug.strip('-')


def normalize_date(date_str: str) -> str:
    """
    Normalize a date string to ISO 8601 calendar date (YYYY-MM-DD).

    Naive values keep the calendar date as written. Values carrying a UTC
    offset are converted to UTC before the date is taken.

    Args:
        date_str: Date string in ISO 8601 or a common explicit format

    Returns:
        ISO 8601 formatted date string

    Raises:
        InvalidDateError: If the string cannot be parsed
    """
    raw = str(date_str).strip() if date_str is not None else ''
    if not raw:
        raise InvalidDateError('Invalid date format. Expected a valid date string.')

    parsed = _parse_iso(raw)
    if parsed is None:
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        raise InvalidDateError(
            f"Invalid date format '{raw}'. Expected a valid date string."
        )

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)

    return parsed.strftime('%Y-%m-%d')


def _parse_iso(raw: str):
    if raw.endswith(('Z', 'z')):
        raw = raw[:-1] + '+00:00'
    if not ISO_PATTERN.match(raw):
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def normalize_time(time_str: str) -> str:
    """
    Normalize a time string to 24-hour format (HH:MM).

    Accepts H, H:MM or HH:MM with an optional AM/PM suffix.

    Args:
        time_str: Time string

    Returns:
        24-hour formatted time string

    Raises:
        InvalidTimeError: If the string does not match the accepted format
        TimeOutOfRangeError: If the hour or minute is out of range
    """
    raw = str(time_str).strip() if time_str is not None else ''
    match = TIME_PATTERN.match(raw)
    if not match:
        raise InvalidTimeError(
            f"Invalid time format '{raw}'. Use H:MM, HH:MM or include AM/PM."
        )

    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    meridiem = match.group(3).lower() if match.group(3) else None

    if meridiem:
        if hour == 12:
            hour = 0 if meridiem == 'am' else 12
        elif meridiem == 'pm':
            hour += 12

    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise TimeOutOfRangeError(f"Time value out of range: '{raw}'")

    return f'{hour:02d}:{minute:02d}'
