"""Host-side event drafting.

A ``DraftState`` is the form a user edits before sending. It is immutable:
every step returns a new state, and ``context_loaded`` travels with the
state so a late context-menu capture cannot overwrite an already filled
draft.
"""

import asyncio
import logging
import time
from datetime import date, datetime, timedelta
from typing import Optional

import pytz
from pydantic import BaseModel, Field

from .extractors.page_info import PageInfo
from .extractors.remote import RemotePage
from .models.event import CalendarEvent
from .models.suggestion import DateTimeSuggestion, DescriptionSuggestion
from .utils.date_utils import (
    ensure_utc,
    next_whole_hour,
    parse_iso,
    restore_date_time,
    to_iso_string,
    to_local_iso,
)
from .utils.exceptions import EventValidationError
from .utils.text import build_description, truncate_text
from .writers.base import CalendarWriter

logger = logging.getLogger(__name__)

CONTEXT_MAX_AGE = 10.0  # seconds
MAX_TITLE_LENGTH = 100


class ContextCapture(BaseModel):
    """What the user right-clicked on, recorded at the time of the click."""

    url: Optional[str] = None
    title: str = ""
    selection: str = ""
    timestamp: float = Field(default_factory=time.time)

    def is_fresh(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now - self.timestamp < CONTEXT_MAX_AGE


class DraftState(BaseModel):
    """Event form values.

    Timed ``start``/``end`` are local ``YYYY-MM-DDTHH:MM`` values in the
    draft's time zone; all-day values are ``YYYY-MM-DD``.
    """

    title: str = ""
    start: str = ""
    end: str = ""
    all_day: bool = False
    description: str = ""
    url: str = ""
    context_loaded: bool = False

    model_config = {"frozen": True}


def new_draft(tz: pytz.BaseTzInfo, now: Optional[datetime] = None) -> DraftState:
    """Empty draft starting at the next whole hour, one hour long."""
    now = ensure_utc(now or datetime.now(pytz.utc)).astimezone(tz)
    start = tz.normalize(next_whole_hour(now))
    end = tz.normalize(start + timedelta(hours=1))
    return DraftState(start=to_local_iso(start, tz), end=to_local_iso(end, tz))


def apply_context(state: DraftState, capture: ContextCapture, now: Optional[float] = None) -> DraftState:
    """Fill the draft from a context-menu capture, once, while it is fresh."""
    if state.context_loaded or not capture.is_fresh(now):
        return state

    if capture.selection:
        title = truncate_text(capture.selection, MAX_TITLE_LENGTH)
    else:
        title = capture.title or state.title
    url = capture.url or state.url
    return state.model_copy(
        update={
            "title": title,
            "url": url,
            # Sibling text, if any, fills the body later
            "description": build_description("", url or None),
            "context_loaded": True,
        }
    )


def apply_page_info(state: DraftState, info: Optional[PageInfo]) -> DraftState:
    """Prefill title and description from the page, unless a capture did already."""
    if info is None or state.context_loaded:
        return state
    update = {}
    if info.title:
        update["title"] = info.title
    if info.description:
        update["description"] = build_description(info.description, state.url or None)
    return state.model_copy(update=update)


def apply_description_body(state: DraftState, text: str) -> DraftState:
    """Replace the description body, keeping the ``Source:`` footer."""
    return state.model_copy(update={"description": build_description(text, state.url or None)})


def apply_date_suggestion(
    state: DraftState, suggestion: DateTimeSuggestion, tz: pytz.BaseTzInfo
) -> DraftState:
    """Use a suggested slot; suggestions without an end last one hour."""
    start = parse_iso(suggestion.start)
    end = parse_iso(suggestion.end) if suggestion.end else start + timedelta(hours=1)
    return state.model_copy(
        update={
            "all_day": False,
            "start": to_local_iso(start, tz),
            "end": to_local_iso(end, tz),
        }
    )


def set_all_day(
    state: DraftState,
    all_day: bool,
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> DraftState:
    """Switch between all-day dates and timed values."""
    if all_day == state.all_day:
        return state
    now = ensure_utc(now or datetime.now(pytz.utc))
    selected = state.start[:10] if state.start else now.astimezone(tz).strftime("%Y-%m-%d")

    if all_day:
        return state.model_copy(update={"all_day": True, "start": selected, "end": selected})

    start, end = restore_date_time(selected, tz, now)
    return state.model_copy(
        update={"all_day": False, "start": to_local_iso(start, tz), "end": to_local_iso(end, tz)}
    )


def _local_instant(value: str, tz: pytz.BaseTzInfo) -> datetime:
    try:
        parsed = parse_iso(value)
    except ValueError as e:
        raise EventValidationError(f"Invalid date/time: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = tz.localize(parsed)
    return parsed


def _calendar_date(value: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise EventValidationError(f"Invalid date: {value!r}") from e


def validate_draft(state: DraftState, tz: pytz.BaseTzInfo) -> None:
    """
    Check the draft before it is sent.

    Raises:
        EventValidationError: Empty title, or end not after start
    """
    if not state.title.strip():
        raise EventValidationError("Title is required.")
    if state.all_day:
        if _calendar_date(state.end) < _calendar_date(state.start):
            raise EventValidationError("End date must be on or after start date.")
    elif _local_instant(state.end, tz) <= _local_instant(state.start, tz):
        raise EventValidationError("End time must be after start time.")


def build_event(state: DraftState, tz: pytz.BaseTzInfo) -> CalendarEvent:
    """Turn a validated draft into an event; timed values become UTC instants."""
    if state.all_day:
        start, end = state.start[:10], state.end[:10]
    else:
        start = to_iso_string(_local_instant(state.start, tz))
        end = to_iso_string(_local_instant(state.end, tz))
    return CalendarEvent(
        title=state.title,
        start=start,
        end=end,
        all_day=state.all_day,
        description=state.description or None,
        url=state.url or None,
    )


def publish(state: DraftState, writer: CalendarWriter, tz: pytz.BaseTzInfo) -> str:
    """
    Validate the draft and create the event.

    Returns:
        Location of the created resource

    Raises:
        EventValidationError: If the draft is invalid
        CalendarWriteError: If the server rejects the event
    """
    validate_draft(state, tz)
    event = build_event(state, tz)
    return writer.create_event(event)


class SuggestionBoard:
    """Suggestions shown to the user, filled as extractions resolve.

    Results only ever append. Once closed, late results are dropped.
    """

    def __init__(self):
        self.dates: list[DateTimeSuggestion] = []
        self.descriptions: list[DescriptionSuggestion] = []
        self.closed = False

    def add_dates(self, suggestions: list[DateTimeSuggestion]) -> int:
        if self.closed:
            return 0
        known = {s.dedup_key() for s in self.dates}
        added = 0
        for suggestion in suggestions:
            if suggestion.dedup_key() in known:
                continue
            known.add(suggestion.dedup_key())
            self.dates.append(suggestion)
            added += 1
        return added

    def add_descriptions(self, suggestions: list[DescriptionSuggestion]) -> int:
        if self.closed:
            return 0
        known = {s.text for s in self.descriptions}
        added = 0
        for suggestion in suggestions:
            if suggestion.text in known:
                continue
            known.add(suggestion.text)
            self.descriptions.append(suggestion)
            added += 1
        return added

    def close(self) -> None:
        self.closed = True


def capture_selection(page: RemotePage, selection: str) -> "asyncio.Task[Optional[str]]":
    """Start the selection-sibling lookup now, while the selection still exists."""
    return asyncio.ensure_future(page.extract_selection_sibling_text(selection))


async def gather_suggestions(
    page: RemotePage,
    board: SuggestionBoard,
    sibling: "Optional[asyncio.Future[Optional[str]]]" = None,
) -> SuggestionBoard:
    """
    Run date and description extraction concurrently and post results to ``board``.

    Each result is added as soon as it resolves, in whatever order that is.
    """

    async def _dates() -> None:
        board.add_dates(await page.extract_date_suggestions())

    async def _descriptions() -> None:
        board.add_descriptions(await page.extract_description_suggestions())

    async def _sibling() -> None:
        text = await sibling
        if text:
            board.add_descriptions([DescriptionSuggestion(text=text, source="Selection")])

    tasks = [_dates(), _descriptions()]
    if sibling is not None:
        tasks.append(_sibling())
    await asyncio.gather(*tasks)
    return board
