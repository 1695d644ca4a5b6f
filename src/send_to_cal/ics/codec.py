"""iCalendar (RFC 5545) encoding for a single VEVENT."""

import re
import uuid
from datetime import date, datetime, timedelta
from typing import Optional

import pytz

from ..models.event import CalendarEvent
from ..utils.date_utils import format_ics_date, format_utc_stamp, parse_iso

PRODID = "-//SendToCal//EN"
CRLF = "\r\n"
LF = "\n"
MAX_LINE_OCTETS = 75

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_SPECIAL_RE = re.compile(r"([\\;,])")
_ESCAPED_RE = re.compile(r"\\([\\;,nN])")


def generate_uid() -> str:
    """Random UID, also used as the resource file name."""
    return str(uuid.uuid4())


def escape_text(value: str) -> str:
    """
    Escape a TEXT property value.

    Backslashes are escaped before line breaks are turned into ``\\n`` so
    the inserted escapes are never escaped again.
    """
    escaped = _SPECIAL_RE.sub(r"\\\1", value)
    return _NEWLINE_RE.sub(r"\\n", escaped)


def unescape_text(value: str) -> str:
    """Reverse ``escape_text``."""

    def _replace(match: re.Match) -> str:
        char = match.group(1)
        return "\n" if char in "nN" else char

    return _ESCAPED_RE.sub(_replace, value)


def fold_line(line: str, line_ending: str = CRLF) -> str:
    """
    Fold a content line to at most 75 octets per physical line.

    Continuation lines start with a single space, so they carry 74 octets
    of content. Splits never fall inside a multi-byte UTF-8 sequence.
    """
    data = line.encode("utf-8")
    if len(data) <= MAX_LINE_OCTETS:
        return line

    chunks = []
    pos = 0
    size = MAX_LINE_OCTETS
    while pos < len(data):
        end = min(pos + size, len(data))
        # Back off continuation bytes (0b10xxxxxx)
        while end < len(data) and end > pos and (data[end] & 0xC0) == 0x80:
            end -= 1
        chunks.append(data[pos:end].decode("utf-8"))
        pos = end
        size = MAX_LINE_OCTETS - 1
    return f"{line_ending} ".join(chunks)


def unfold_lines(text: str) -> list[str]:
    """Split iCalendar text into logical content lines."""
    unfolded = re.sub(r"\r?\n[ \t]", "", text)
    return [line for line in unfolded.splitlines() if line]


def _all_day_dates(event: CalendarEvent) -> tuple[date, date]:
    start = date.fromisoformat(event.start[:10])
    # DTEND of an all-day event is exclusive
    end = date.fromisoformat(event.end[:10]) + timedelta(days=1)
    return start, end


def _event_lines(event: CalendarEvent, uid: str, now: datetime) -> list[str]:
    if event.all_day:
        start, end = _all_day_dates(event)
        dtstart = f"DTSTART;VALUE=DATE:{format_ics_date(start)}"
        dtend = f"DTEND;VALUE=DATE:{format_ics_date(end)}"
    else:
        dtstart = f"DTSTART:{format_utc_stamp(parse_iso(event.start))}"
        dtend = f"DTEND:{format_utc_stamp(parse_iso(event.end))}"

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{format_utc_stamp(now)}",
        dtstart,
        dtend,
        f"SUMMARY:{escape_text(event.title)}",
    ]
    if event.description:
        lines.append(f"DESCRIPTION:{escape_text(event.description)}")
    if event.url:
        lines.append(f"URL:{event.url}")
    lines.extend(["END:VEVENT", "END:VCALENDAR"])
    return lines


def encode_event(
    event: CalendarEvent,
    uid: str,
    now: Optional[datetime] = None,
    line_ending: str = CRLF,
) -> str:
    """
    Encode an event as a VCALENDAR document.

    Args:
        event: Event to encode; not validated here
        uid: Value of the UID property
        now: DTSTAMP instant (defaults to the current time)
        line_ending: ``CRLF`` per RFC 5545, or ``LF`` for the legacy
            output (LF separators, no trailing line break)

    Returns:
        iCalendar text
    """
    now = now or datetime.now(pytz.utc)
    folded = [fold_line(line, line_ending) for line in _event_lines(event, uid, now)]
    text = line_ending.join(folded)
    if line_ending == CRLF:
        text += CRLF
    return text
