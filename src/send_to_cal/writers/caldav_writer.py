"""CalDAV calendar writer using plain WebDAV requests."""

import base64
import logging
from typing import Optional

import requests

from ..ics.codec import CRLF, encode_event, generate_uid
from ..models.event import CalendarEvent
from ..models.settings import CalDavSettings
from ..utils.exceptions import CalendarWriteError
from .base import CalendarWriter

logger = logging.getLogger(__name__)

PROPFIND_BODY = """<?xml version="1.0" encoding="utf-8" ?>
<D:propfind xmlns:D="DAV:">
  <D:prop>
    <D:resourcetype/>
  </D:prop>
</D:propfind>"""


def basic_auth_header(username: str, password: str) -> str:
    """Basic credentials, UTF-8 encoded so non-ASCII passwords survive."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class CalDAVCalendarWriter(CalendarWriter):
    """Write events to a CalDAV calendar collection."""

    def __init__(
        self,
        settings: CalDavSettings,
        timeout: Optional[float] = None,
        line_ending: str = CRLF,
    ):
        """
        Initialize the writer.

        Args:
            settings: Collection URL and credentials (read only)
            timeout: Request timeout in seconds, None for no timeout
            line_ending: Line ending used by the iCalendar encoder
        """
        self.settings = settings
        self.timeout = timeout
        self.line_ending = line_ending

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {"Authorization": basic_auth_header(self.settings.username, self.settings.password)}
        headers.update(extra)
        return headers

    def check_connection(self) -> bool:
        try:
            resp = requests.request(
                "PROPFIND",
                self.settings.server_url,
                headers=self._headers(
                    **{"Depth": "0", "Content-Type": "application/xml; charset=utf-8"}
                ),
                data=PROPFIND_BODY.encode("utf-8"),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"CalDAV connection check failed: {e}")
            return False

        if not _is_success(resp.status_code):
            logger.error(
                f"CalDAV connection check failed: {resp.status_code} {resp.reason}"
            )
            return False

        logger.debug(f"CalDAV server answered PROPFIND with {resp.status_code}")
        return True

    def create_event(self, event: CalendarEvent) -> str:
        uid = generate_uid()
        ics = encode_event(event, uid, line_ending=self.line_ending)
        target_url = f"{self.settings.collection_url}{uid}.ics"

        # Network errors propagate to the caller unchanged
        resp = requests.request(
            "PUT",
            target_url,
            headers=self._headers(
                **{
                    "Content-Type": "text/calendar; charset=utf-8",
                    # Never overwrite an existing resource
                    "If-None-Match": "*",
                }
            ),
            data=ics.encode("utf-8"),
            timeout=self.timeout,
        )

        if not _is_success(resp.status_code):
            raise CalendarWriteError(
                f"Failed to create event: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
                reason=resp.reason,
            )

        logger.info(f"Created event: {event.title} ({target_url})")
        return target_url
