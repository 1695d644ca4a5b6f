"""Tests for the CalDAV writer."""

import base64
from unittest import mock

import pytest
import requests

from send_to_cal.ics.codec import LF
from send_to_cal.models.event import CalendarEvent
from send_to_cal.models.settings import CalDavSettings
from send_to_cal.utils.exceptions import CalendarWriteError
from send_to_cal.writers.caldav_writer import CalDAVCalendarWriter, basic_auth_header

SETTINGS = CalDavSettings(
    server_url="https://dav.example.com/calendars/me/personal",
    username="jörg",
    password="pä:ss",
)

EVENT = CalendarEvent(
    title="Spring Concert",
    start="2025-04-12T17:30:00.000Z",
    end="2025-04-12T20:00:00.000Z",
    url="https://example.com/concert",
)


def _response(status_code: int, reason: str) -> mock.Mock:
    return mock.Mock(status_code=status_code, reason=reason)


@pytest.fixture
def request_mock():
    with mock.patch("send_to_cal.writers.caldav_writer.requests.request") as patched:
        yield patched


def test_basic_auth_header_is_utf8() -> None:
    header = basic_auth_header("jörg", "pä:ss")
    assert header.startswith("Basic ")
    assert base64.b64decode(header[6:]).decode("utf-8") == "jörg:pä:ss"


@pytest.mark.parametrize("status", [200, 207])
def test_check_connection_success(request_mock, status: int) -> None:
    request_mock.return_value = _response(status, "OK")
    assert CalDAVCalendarWriter(SETTINGS).check_connection() is True

    method, url = request_mock.call_args.args
    kwargs = request_mock.call_args.kwargs
    assert method == "PROPFIND"
    assert url == SETTINGS.server_url
    assert kwargs["headers"]["Depth"] == "0"
    assert kwargs["headers"]["Authorization"] == basic_auth_header("jörg", "pä:ss")
    assert b"<D:resourcetype/>" in kwargs["data"]
    assert kwargs["timeout"] is None


@pytest.mark.parametrize("status", [301, 401, 404, 500])
def test_check_connection_rejects_non_success(request_mock, status: int) -> None:
    request_mock.return_value = _response(status, "Nope")
    assert CalDAVCalendarWriter(SETTINGS).check_connection() is False


def test_check_connection_returns_false_on_network_error(request_mock) -> None:
    request_mock.side_effect = requests.ConnectionError("connection refused")
    assert CalDAVCalendarWriter(SETTINGS).check_connection() is False


def test_create_event_puts_ics(request_mock) -> None:
    request_mock.return_value = _response(201, "Created")
    location = CalDAVCalendarWriter(SETTINGS, timeout=5).create_event(EVENT)

    method, url = request_mock.call_args.args
    kwargs = request_mock.call_args.kwargs
    assert method == "PUT"
    assert url == location
    assert url.startswith("https://dav.example.com/calendars/me/personal/")
    assert url.endswith(".ics")
    assert kwargs["headers"]["Content-Type"] == "text/calendar; charset=utf-8"
    assert kwargs["headers"]["If-None-Match"] == "*"
    assert kwargs["timeout"] == 5

    body = kwargs["data"].decode("utf-8")
    uid = url.rsplit("/", 1)[1][: -len(".ics")]
    assert f"UID:{uid}\r\n" in body
    assert "SUMMARY:Spring Concert\r\n" in body
    assert "DTSTART:20250412T173000Z\r\n" in body


def test_create_event_keeps_existing_trailing_slash(request_mock) -> None:
    request_mock.return_value = _response(204, "No Content")
    settings = SETTINGS.model_copy(update={"server_url": "https://dav.example.com/cal/"})
    location = CalDAVCalendarWriter(settings).create_event(EVENT)
    assert location.startswith("https://dav.example.com/cal/")
    assert "//" not in location[len("https://"):]


def test_create_event_uses_configured_line_ending(request_mock) -> None:
    request_mock.return_value = _response(201, "Created")
    CalDAVCalendarWriter(SETTINGS, line_ending=LF).create_event(EVENT)
    assert b"\r" not in request_mock.call_args.kwargs["data"]


def test_create_event_conflict_raises(request_mock) -> None:
    request_mock.return_value = _response(409, "Conflict")
    with pytest.raises(CalendarWriteError, match="409") as excinfo:
        CalDAVCalendarWriter(SETTINGS).create_event(EVENT)
    assert excinfo.value.status_code == 409
    assert excinfo.value.reason == "Conflict"
    assert str(excinfo.value) == "Failed to create event: 409 Conflict"


def test_create_event_precondition_failed_raises(request_mock) -> None:
    request_mock.return_value = _response(412, "Precondition Failed")
    with pytest.raises(CalendarWriteError, match="412 Precondition Failed"):
        CalDAVCalendarWriter(SETTINGS).create_event(EVENT)


def test_create_event_network_error_propagates(request_mock) -> None:
    request_mock.side_effect = requests.ConnectionError("connection reset")
    with pytest.raises(requests.ConnectionError):
        CalDAVCalendarWriter(SETTINGS).create_event(EVENT)


def test_uids_differ_between_events(request_mock) -> None:
    request_mock.return_value = _response(201, "Created")
    writer = CalDAVCalendarWriter(SETTINGS)
    assert writer.create_event(EVENT) != writer.create_event(EVENT)
