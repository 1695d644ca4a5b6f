"""Locate schema.org Event nodes in JSON-LD blocks and microdata."""

import json
from typing import Any, Iterator, Optional

from .base import Candidate, Skipped
from .document import PageDocument, PageElement

JSON_LD_SELECTOR = 'script[type="application/ld+json"]'
MICRODATA_EVENT_SELECTOR = '[itemtype*="schema.org/Event"]'


def is_event_type(node: dict) -> bool:
    """True for ``Event`` and schema.org Event subtypes (``MusicEvent``, ...)."""
    raw = node.get("@type")
    types = raw if isinstance(raw, list) else [raw]
    return any(isinstance(t, str) and t.rsplit("/", 1)[-1].endswith("Event") for t in types)


def _flatten(data: Any) -> Iterator[Any]:
    items = data if isinstance(data, list) else [data]
    for item in items:
        if isinstance(item, dict) and isinstance(item.get("@graph"), list):
            yield from item["@graph"]
        else:
            yield item


def json_ld_events(document: PageDocument) -> Iterator[Any]:
    """
    Yield Event nodes from every JSON-LD block, or ``Skipped`` per bad block.

    Top-level arrays and ``@graph`` collections are flattened.
    """
    for index, script in enumerate(document.select(JSON_LD_SELECTOR)):
        try:
            data = json.loads(script.text or "")
        except ValueError as e:
            yield Skipped(f"JSON-LD block {index} is not valid JSON: {e}")
            continue
        for node in _flatten(data):
            if isinstance(node, dict) and is_event_type(node):
                yield Candidate(node)


def microdata_events(document: PageDocument) -> list[PageElement]:
    """Elements scoped to a schema.org Event microdata item."""
    return document.select(MICRODATA_EVENT_SELECTOR)


def microdata_value(scope: PageElement, prop: str) -> Optional[str]:
    """
    Value of an ``itemprop`` inside ``scope``.

    Reads ``datetime``, then ``content``, then the element text.
    """
    element = scope.select_one(f'[itemprop="{prop}"]')
    if element is None:
        return None
    return element.get_attribute("datetime") or element.get_attribute("content") or element.text
