"""Pure normalizers for titles, dates and times."""
import re
import unicodedata
from datetime import datetime, timezone
from typing import Optional

from processor.errors import InvalidDate, InvalidTime

NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')
REPEATED_DASHES = re.compile(r'-{2,}')

RANGE_SEPARATOR = re.compile(r'\s*-\s*')
TIME_PATTERN = re.compile(
    r'^(\d{1,2})(?::(\d{1,2}))?\s*(am|pm)?$', re.IGNORECASE
)

# Tried in order after ISO 8601; US month-first wins over day-first
DATE_FORMATS = [
    '%Y-%m-%d',      # ISO 8601 without zero padding
    '%m/%d/%Y',      # US format
    '%m-%d-%Y',      # US format with dashes
    '%B %d, %Y',     # Full month name
    '%b %d, %Y',     # Abbreviated month name
    '%B %d %Y',
    '%b %d %Y',
    '%d %B %Y',      # Day-first long month
    '%d %b %Y',
    '%d/%m/%Y',      # European format
    '%d.%m.%Y',
    '%Y/%m/%d',      # Alternative ISO format
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y %I:%M %p',
    '%B %d, %Y %H:%M',
    '%B %d, %Y %I:%M %p',
    '%b %d %Y %H:%M',
    '%a %b %d %Y',   # Weekday prefix, e.g. Tue Mar 05 2024
]


def slugify(title: str) -> str:
    """
    Convert a title to a URL-safe slug.

    Accented characters fold to their base letter, every run of other
    characters becomes a single dash and edge dashes are trimmed.

    Args:
        title: Free-text title

    Returns:
        Slug string, empty when the title has no letters or digits
    """
    decomposed = unicodedata.normalize('NFKD', title.lower())
    stripped = ''.join(
        char for char in decomposed if not unicodedata.combining(char)
    )
    slug = NON_SLUG_CHARS.sub('-', stripped).strip('-')
    return REPEATED_DASHES.sub('-', slug)


def normalize_date(raw: str) -> str:
    """
    Normalize date to ISO 8601 format (YYYY-MM-DD).

    Offset-aware values are converted to UTC before the calendar date is
    taken; naive values are read as UTC.

    Args:
        raw: Date string in various formats

    Returns:
        ISO 8601 formatted date string

    Raises:
        InvalidDate: If the text cannot be parsed as a date
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidDate('date', 'Invalid date format. Expect a parsable date string.')

    parsed = _parse_iso(raw.strip()) or _parse_formats(raw.strip())
    if parsed is None:
        raise InvalidDate('date', 'Invalid date format. Expect a parsable date string.')

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime('%Y-%m-%d')


def _parse_iso(text: str) -> Optional[datetime]:
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _parse_formats(text: str) -> Optional[datetime]:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def normalize_time(raw: str) -> str:
    """
    Normalize time to 24-hour HH:MM, or a range HH:MM-HH:MM.

    Accepts simple am/pm variants such as "6pm" or "9:30 AM - 11am".
    The end of a range is not required to be after its start.

    Args:
        raw: Time string

    Returns:
        Canonical time or time range

    Raises:
        InvalidTime: If the text or any part of the range is malformed
    """
    if not isinstance(raw, str):
        raise InvalidTime('time', 'Invalid time format.')

    parts = RANGE_SEPARATOR.split(raw.strip())
    if len(parts) == 1:
        return _to_24h(parts[0])
    if len(parts) == 2:
        return f"{_to_24h(parts[0])}-{_to_24h(parts[1])}"
    raise InvalidTime('time', 'Invalid time range format.')


def _to_24h(text: str) -> str:
    match = TIME_PATTERN.match(text.strip())
    if not match:
        raise InvalidTime(
            'time',
            'Invalid time format. Use HH:mm or h(:mm) am/pm, optionally as a range.'
        )

    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    meridiem = (match.group(3) or '').lower()

    if meridiem == 'am' and hour == 12:
        hour = 0
    elif meridiem == 'pm' and hour != 12:
        hour += 12

    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise InvalidTime('time', f'Invalid time value: {text.strip()}')

    return f"{hour:02d}:{minute:02d}"
