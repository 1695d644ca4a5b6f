"""Message-passing boundary between the host and a page context.

The page side receives a JSON-compatible request naming an extraction
function, runs it against its own snapshot of the document and answers with
a JSON-compatible response. Nothing but those payloads crosses the boundary.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

import pytz
from pydantic import BaseModel, Field

from ..models.suggestion import DateTimeSuggestion, DescriptionSuggestion
from ..utils.exceptions import ExtractionError
from .dates import extract_date_suggestions
from .descriptions import extract_description_suggestions
from .document import PageDocument, SoupDocument
from .page_info import PageInfo, scrape_page
from .selection import extract_selection_sibling_text

logger = logging.getLogger(__name__)

DATE_SUGGESTIONS = "date_suggestions"
DESCRIPTION_SUGGESTIONS = "description_suggestions"
SELECTION_SIBLING_TEXT = "selection_sibling_text"
SCRAPE_PAGE = "scrape_page"


class ExtractionRequest(BaseModel):
    function_id: str
    args: dict[str, Any] = Field(default_factory=dict)


class ExtractionResponse(BaseModel):
    function_id: str
    result: Any = None
    error: Optional[str] = None


def _dates(document: PageDocument, timezone: str = "UTC") -> list[dict]:
    suggestions = extract_date_suggestions(document, pytz.timezone(timezone))
    return [s.model_dump() for s in suggestions]


def _descriptions(document: PageDocument) -> list[dict]:
    return [s.model_dump() for s in extract_description_suggestions(document)]


def _selection_sibling(document: PageDocument, selection: str = "") -> Optional[str]:
    return extract_selection_sibling_text(document, document.find_text(selection))


def _page_info(document: PageDocument) -> dict:
    return scrape_page(document).model_dump()


PAGE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    DATE_SUGGESTIONS: _dates,
    DESCRIPTION_SUGGESTIONS: _descriptions,
    SELECTION_SIBLING_TEXT: _selection_sibling,
    SCRAPE_PAGE: _page_info,
}


def handle_request(html: str, payload: dict) -> dict:
    """
    Page side: run one extraction function against an HTML snapshot.

    Args:
        html: Page markup as seen by the page context
        payload: Serialized ``ExtractionRequest``

    Returns:
        Serialized ``ExtractionResponse``; failures are reported in ``error``
    """
    request = ExtractionRequest.model_validate(payload)
    func = PAGE_FUNCTIONS.get(request.function_id)
    if func is None:
        return ExtractionResponse(
            function_id=request.function_id,
            error=f"Unknown extraction function: {request.function_id}",
        ).model_dump()

    try:
        result = func(SoupDocument(html), **request.args)
    except Exception as e:
        logger.debug(f"{request.function_id} failed in page context", exc_info=True)
        return ExtractionResponse(function_id=request.function_id, error=str(e)).model_dump()
    return ExtractionResponse(function_id=request.function_id, result=result).model_dump()


class RemotePage:
    """Host side handle on a page context."""

    def __init__(self, html: str, timezone: str = "UTC"):
        self._html = html
        self.timezone = timezone

    async def call(self, function_id: str, **args: Any) -> Any:
        """
        Run a page function in a worker thread and return its result.

        Raises:
            ExtractionError: If the page side reports an error
        """
        payload = ExtractionRequest(function_id=function_id, args=args).model_dump()
        raw = await asyncio.to_thread(handle_request, self._html, payload)
        response = ExtractionResponse.model_validate(raw)
        if response.error is not None:
            raise ExtractionError(f"{function_id}: {response.error}")
        return response.result

    async def extract_date_suggestions(self) -> list[DateTimeSuggestion]:
        try:
            result = await self.call(DATE_SUGGESTIONS, timezone=self.timezone)
        except ExtractionError as e:
            logger.info(f"Could not extract date/time suggestions: {e}")
            return []
        return [DateTimeSuggestion.model_validate(item) for item in result or []]

    async def extract_description_suggestions(self) -> list[DescriptionSuggestion]:
        try:
            result = await self.call(DESCRIPTION_SUGGESTIONS)
        except ExtractionError as e:
            logger.info(f"Could not extract description suggestions: {e}")
            return []
        return [DescriptionSuggestion.model_validate(item) for item in result or []]

    async def extract_selection_sibling_text(self, selection: str) -> Optional[str]:
        try:
            return await self.call(SELECTION_SIBLING_TEXT, selection=selection)
        except ExtractionError as e:
            logger.info(f"Could not extract selection sibling text: {e}")
            return None

    async def scrape_page(self) -> Optional[PageInfo]:
        try:
            result = await self.call(SCRAPE_PAGE)
        except ExtractionError as e:
            logger.info(f"Could not scrape page data: {e}")
            return None
        return PageInfo.model_validate(result)
