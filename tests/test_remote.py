"""Tests for the page message boundary and concurrent suggestion gathering."""

import asyncio
import json

import pytest

from send_to_cal.extractors.remote import (
    DATE_SUGGESTIONS,
    SCRAPE_PAGE,
    ExtractionRequest,
    RemotePage,
    handle_request,
)
from send_to_cal.models.suggestion import DateTimeSuggestion, DescriptionSuggestion
from send_to_cal.session import SuggestionBoard, capture_selection, gather_suggestions
from send_to_cal.utils.exceptions import ExtractionError


def test_handle_request_returns_serializable_payload(event_page: str) -> None:
    response = handle_request(event_page, ExtractionRequest(function_id=DATE_SUGGESTIONS).model_dump())
    # Must survive a trip through JSON unchanged
    assert json.loads(json.dumps(response)) == response
    assert response["error"] is None
    assert response["result"][0]["label"] == "Spring Concert"


def test_handle_request_unknown_function(event_page: str) -> None:
    response = handle_request(event_page, {"function_id": "read_cookies"})
    assert response["result"] is None
    assert "Unknown extraction function" in response["error"]


def test_handle_request_reports_failures(event_page: str) -> None:
    payload = {"function_id": DATE_SUGGESTIONS, "args": {"timezone": "Mars/Olympus_Mons"}}
    response = handle_request(event_page, payload)
    assert response["error"]


def test_scrape_page(event_page: str) -> None:
    response = handle_request(event_page, {"function_id": SCRAPE_PAGE})
    assert response["result"] == {
        "title": "Spring Concert",
        "description": "Chamber music in the main hall.",
    }


def test_scrape_page_falls_back_to_title_and_meta() -> None:
    html = """<html><head><title>  Plain title </title>
      <meta name="description" content="Meta only"></head><body></body></html>"""
    response = handle_request(html, {"function_id": SCRAPE_PAGE})
    assert response["result"] == {"title": "Plain title", "description": "Meta only"}


async def test_remote_page_typed_helpers(event_page: str) -> None:
    page = RemotePage(event_page)
    dates = await page.extract_date_suggestions()
    descriptions = await page.extract_description_suggestions()
    assert isinstance(dates[0], DateTimeSuggestion)
    assert isinstance(descriptions[0], DescriptionSuggestion)
    assert (await page.scrape_page()).title == "Spring Concert"


async def test_remote_page_call_raises_on_error(event_page: str) -> None:
    with pytest.raises(ExtractionError):
        await RemotePage(event_page).call("nope")


async def test_remote_page_helpers_swallow_page_errors(event_page: str) -> None:
    page = RemotePage(event_page, timezone="Mars/Olympus_Mons")
    assert await page.extract_date_suggestions() == []


async def test_gather_suggestions_with_selection(event_page: str) -> None:
    page = RemotePage(event_page)
    sibling = capture_selection(page, "Concert")
    board = await gather_suggestions(page, SuggestionBoard(), sibling)

    assert len(board.dates) == 4
    assert len(board.descriptions) == 4
    # The sibling paragraph equals the "Page content" suggestion, so it is only shown once
    texts = [s.text for s in board.descriptions]
    assert texts.count("Doors open at 19:00 and the concert starts at 19:30 sharp.") == 1


async def test_selection_capture_starts_immediately(event_page: str) -> None:
    page = RemotePage(event_page)
    task = capture_selection(page, "Concert")
    assert isinstance(task, asyncio.Future)
    assert await task == "Doors open at 19:00 and the concert starts at 19:30 sharp."


def test_board_only_appends() -> None:
    board = SuggestionBoard()
    first = DescriptionSuggestion(text="From the selection", source="Selection")
    board.add_descriptions([first])
    added = board.add_descriptions(
        [
            DescriptionSuggestion(text="From the selection", source="Open Graph"),
            DescriptionSuggestion(text="Something new", source="Open Graph"),
        ]
    )
    assert added == 1
    assert board.descriptions == [first, DescriptionSuggestion(text="Something new", source="Open Graph")]

    a = DateTimeSuggestion(start="2025-01-01T00:00:00.000Z", label="a")
    board.add_dates([a])
    board.add_dates([DateTimeSuggestion(start="2025-01-01T00:00:00.000Z", label="again"), a])
    assert board.dates == [a]


def test_closed_board_ignores_late_results() -> None:
    board = SuggestionBoard()
    board.close()
    assert board.add_dates([DateTimeSuggestion(start="2025-01-01T00:00:00.000Z", label="a")]) == 0
    assert board.add_descriptions([DescriptionSuggestion(text="x", source="y")]) == 0
    assert board.dates == []
    assert board.descriptions == []
