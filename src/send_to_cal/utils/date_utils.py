"""Date and time utilities for Send to Calendar."""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional

import pytz
from dateutil import parser as dateutil_parser

from ..models.suggestion import DateTimeSuggestion

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime is in UTC.

    Args:
        dt: Datetime to convert (naive values are taken as UTC)

    Returns:
        UTC datetime
    """
    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc)


def localize(dt: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Attach ``tz`` to a naive datetime, leave aware ones alone."""
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt


# Two far-apart defaults reveal which date fields the value itself supplied
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def parse_page_date(value: Optional[str], tz: pytz.BaseTzInfo = pytz.utc) -> Optional[datetime]:
    """
    Permissively parse a date string found in page markup.

    Bare ``YYYY-MM-DD`` dates are midnight UTC; other values without an
    offset are interpreted in ``tz``. Values without a year (times,
    weekdays) are rejected; a missing month or day becomes 1, so ``2025``
    is January 1 and ``March 2025`` is March 1.

    Returns:
        Aware UTC datetime, or None if the value cannot be parsed
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = dateutil_parser.parse(text, default=_DEFAULT_A)
        other = dateutil_parser.parse(text, default=_DEFAULT_B)
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Unparseable date {text!r}: {e}")
        return None

    if parsed.year != other.year or (parsed.month != other.month and parsed.day == other.day):
        logger.debug(f"Incomplete date {text!r}")
        return None

    if _ISO_DATE_RE.match(text):
        return pytz.utc.localize(parsed)
    return ensure_utc(localize(parsed, tz))


def to_iso_string(dt: datetime) -> str:
    """Render an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 instant; raises ValueError when malformed."""
    return dateutil_parser.isoparse(value)


def format_utc_stamp(dt: datetime) -> str:
    """Render an instant as an iCalendar UTC date-time (``YYYYMMDDTHHMMSSZ``)."""
    return ensure_utc(dt).strftime("%Y%m%dT%H%M%SZ")


def format_ics_date(d: date) -> str:
    """Render a calendar date as an iCalendar DATE (``YYYYMMDD``)."""
    return d.strftime("%Y%m%d")


def to_local_iso(dt: datetime, tz: pytz.BaseTzInfo) -> str:
    """Render an instant as a local ``YYYY-MM-DDTHH:MM`` form value."""
    return ensure_utc(dt).astimezone(tz).strftime("%Y-%m-%dT%H:%M")


def next_whole_hour(now: datetime) -> datetime:
    """The first whole hour strictly after ``now``."""
    return now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def restore_date_time(
    date_only: str,
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """
    Pick a one hour slot on ``date_only`` when leaving all-day mode.

    Today snaps to the next whole hour, any other day starts at 09:00.

    Returns:
        Tuple of aware (start, end) datetimes in ``tz``
    """
    now = ensure_utc(now or datetime.now(pytz.utc)).astimezone(tz)
    if date_only == now.strftime("%Y-%m-%d"):
        start = tz.normalize(next_whole_hour(now))
    else:
        day = date.fromisoformat(date_only)
        start = tz.localize(datetime(day.year, day.month, day.day, 9, 0))
    return start, tz.normalize(start + timedelta(hours=1))


def _format_day(dt: datetime) -> str:
    return f"{dt:%b} {dt.day}, {dt.year}"


def _format_time(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt:%M} {dt:%p}"


def format_suggestion(suggestion: DateTimeSuggestion, tz: pytz.BaseTzInfo = pytz.utc) -> str:
    """
    Human-readable text for a date/time suggestion chip.

    Args:
        suggestion: Suggestion to format
        tz: Display time zone

    Returns:
        e.g. ``Mar 15, 2025, 7:30 PM – 10:00 PM``
    """
    start = parse_iso(suggestion.start).astimezone(tz)
    has_time = start.hour != 0 or start.minute != 0

    if suggestion.end:
        end = parse_iso(suggestion.end).astimezone(tz)
        if start.date() == end.date():
            if has_time:
                return f"{_format_day(start)}, {_format_time(start)} – {_format_time(end)}"
            return _format_day(start)
        if has_time:
            return (
                f"{_format_day(start)} {_format_time(start)} – "
                f"{_format_day(end)} {_format_time(end)}"
            )
        return f"{_format_day(start)} – {_format_day(end)}"

    if has_time:
        return f"{_format_day(start)}, {_format_time(start)}"
    return _format_day(start)
