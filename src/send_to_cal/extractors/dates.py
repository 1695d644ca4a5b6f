"""Date/time suggestions from page markup.

Passes run in a fixed priority order and results keep that order:
JSON-LD Events, microdata Events, ``<time datetime>`` elements, then meta
tags. The first five distinct ``start|end`` pairs win.
"""

import logging
import re
from typing import Iterator

import pytz

from ..models.suggestion import DateTimeSuggestion
from ..utils.date_utils import parse_page_date, to_iso_string
from .base import Candidate, Result, Skipped, collect, dedupe
from .document import PageDocument
from .structured_data import json_ld_events, microdata_events, microdata_value

logger = logging.getLogger(__name__)

_YEAR_ONLY_RE = re.compile(r"^\d{4}$")

META_DATE_TAGS = [
    ('meta[property="article:published_time"]', "Published"),
    ('meta[property="article:modified_time"]', "Modified"),
    ('meta[property="event:start_time"]', "Event start"),
    ('meta[name="date"]', "Page date"),
    ('meta[name="DC.date"]', "Page date"),
]


def _json_ld_dates(document: PageDocument, tz: pytz.BaseTzInfo) -> Iterator[Result]:
    for result in json_ld_events(document):
        if isinstance(result, Skipped):
            yield result
            continue
        node = result.value
        raw_start = node.get("startDate")
        start = parse_page_date(raw_start, tz) if isinstance(raw_start, str) else None
        if start is None:
            yield Skipped(f"JSON-LD Event without a usable startDate: {raw_start!r}")
            continue
        raw_end = node.get("endDate")
        end = parse_page_date(raw_end, tz) if isinstance(raw_end, str) else None
        name = node.get("name")
        yield Candidate(
            DateTimeSuggestion(
                start=to_iso_string(start),
                end=to_iso_string(end) if end else None,
                label=name.strip() if isinstance(name, str) and name.strip() else "Event",
            )
        )


def _microdata_dates(document: PageDocument, tz: pytz.BaseTzInfo) -> Iterator[Result]:
    for scope in microdata_events(document):
        raw_start = microdata_value(scope, "startDate")
        if raw_start is None:
            continue
        start = parse_page_date(raw_start, tz)
        if start is None:
            yield Skipped(f"microdata startDate not parseable: {raw_start!r}")
            continue
        raw_end = microdata_value(scope, "endDate")
        end = parse_page_date(raw_end, tz) if raw_end else None
        name_element = scope.select_one('[itemprop="name"]')
        name = name_element.text.strip() if name_element is not None else ""
        yield Candidate(
            DateTimeSuggestion(
                start=to_iso_string(start),
                end=to_iso_string(end) if end else None,
                label=name or "Event",
            )
        )


def _time_element_dates(document: PageDocument, tz: pytz.BaseTzInfo) -> Iterator[Result]:
    for element in document.select("time[datetime]"):
        raw = (element.get_attribute("datetime") or "").strip()
        if not raw:
            continue
        # Durations and bare years are not points in time
        if raw.startswith("P") or _YEAR_ONLY_RE.match(raw):
            yield Skipped(f"<time> value is a duration or a year: {raw!r}")
            continue
        start = parse_page_date(raw, tz)
        if start is None:
            yield Skipped(f"<time> value not parseable: {raw!r}")
            continue
        yield Candidate(
            DateTimeSuggestion(
                start=to_iso_string(start),
                label=element.text.strip() or "Page date",
            )
        )


def _meta_dates(document: PageDocument, tz: pytz.BaseTzInfo) -> Iterator[Result]:
    for selector, label in META_DATE_TAGS:
        element = document.select_one(selector)
        if element is None:
            continue
        content = element.get_attribute("content")
        start = parse_page_date(content, tz)
        if start is None:
            yield Skipped(f"{selector} content not parseable: {content!r}")
            continue
        yield Candidate(DateTimeSuggestion(start=to_iso_string(start), label=label))


def extract_date_suggestions(
    document: PageDocument,
    tz: pytz.BaseTzInfo = pytz.utc,
) -> list[DateTimeSuggestion]:
    """
    Collect up to five distinct date/time suggestions from a page.

    Args:
        document: Page snapshot
        tz: Time zone for values without an explicit offset

    Returns:
        Suggestions in pass priority order
    """
    suggestions = collect(
        [
            ("JSON-LD dates", lambda: _json_ld_dates(document, tz)),
            ("microdata dates", lambda: _microdata_dates(document, tz)),
            ("<time> dates", lambda: _time_element_dates(document, tz)),
            ("meta dates", lambda: _meta_dates(document, tz)),
        ]
    )
    unique = dedupe(suggestions, key=DateTimeSuggestion.dedup_key)
    logger.debug(f"Found {len(suggestions)} date candidate(s), kept {len(unique)}")
    return unique
