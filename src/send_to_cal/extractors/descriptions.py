"""Description suggestions from page markup."""

import logging
from typing import Iterator, Optional

from ..models.suggestion import DescriptionSuggestion
from ..utils.text import truncate_text
from .base import Candidate, Result, Skipped, collect, dedupe
from .document import PageDocument
from .structured_data import json_ld_events, microdata_events

logger = logging.getLogger(__name__)

MIN_PARAGRAPH_LENGTH = 20


def _meta_content(document: PageDocument, selector: str) -> Optional[str]:
    element = document.select_one(selector)
    if element is None:
        return None
    content = element.get_attribute("content")
    if not content or not content.strip():
        return None
    return truncate_text(content)


def _json_ld_descriptions(document: PageDocument) -> Iterator[Result]:
    for result in json_ld_events(document):
        if isinstance(result, Skipped):
            yield result
            continue
        description = result.value.get("description")
        if isinstance(description, str) and description.strip():
            yield Candidate(
                DescriptionSuggestion(
                    text=truncate_text(description), source="Event (structured data)"
                )
            )


def _microdata_descriptions(document: PageDocument) -> Iterator[Result]:
    for scope in microdata_events(document):
        element = scope.select_one('[itemprop="description"]')
        if element is None:
            continue
        text = element.get_attribute("content") or element.text
        if text.strip():
            yield Candidate(DescriptionSuggestion(text=truncate_text(text), source="Event (Microdata)"))


def _meta_descriptions(document: PageDocument) -> Iterator[Result]:
    og_text = _meta_content(document, 'meta[property="og:description"]')
    if og_text:
        yield Candidate(DescriptionSuggestion(text=og_text, source="Open Graph"))

    meta_text = _meta_content(document, 'meta[name="description"]')
    if meta_text and meta_text == og_text:
        yield Skipped("meta description repeats og:description")
    elif meta_text:
        yield Candidate(DescriptionSuggestion(text=meta_text, source="Meta description"))


def _content_descriptions(document: PageDocument) -> Iterator[Result]:
    container = document.select_one("article") or document.select_one("main")
    if container is None:
        return
    for paragraph in container.select("p"):
        text = paragraph.text.strip()
        if len(text) > MIN_PARAGRAPH_LENGTH:
            yield Candidate(DescriptionSuggestion(text=truncate_text(text), source="Page content"))
            return


def extract_description_suggestions(document: PageDocument) -> list[DescriptionSuggestion]:
    """
    Collect up to five distinct description suggestions from a page.

    Order: JSON-LD Event description, microdata Event description,
    ``og:description``, meta description, first substantial paragraph of
    the main content.
    """
    suggestions = collect(
        [
            ("JSON-LD descriptions", lambda: _json_ld_descriptions(document)),
            ("microdata descriptions", lambda: _microdata_descriptions(document)),
            ("meta descriptions", lambda: _meta_descriptions(document)),
            ("page content", lambda: _content_descriptions(document)),
        ]
    )
    return dedupe(suggestions, key=lambda s: s.text)
