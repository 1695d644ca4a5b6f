"""Suggest the text that follows a selection.

Selecting an event heading usually means the paragraph after it describes
the event. The selection only exists while the user gesture is active, so
hosts run this eagerly and consume the result later.
"""

import logging
from typing import Optional

from ..utils.text import truncate_text
from .document import PageDocument, PageElement

logger = logging.getLogger(__name__)

BLOCK_DISPLAYS = frozenset({"block", "flex", "grid", "list-item"})
MIN_SIBLING_LENGTH = 10


def _enclosing_block(document: PageDocument, anchor: PageElement) -> Optional[PageElement]:
    root = document.body
    node: Optional[PageElement] = anchor
    while node is not None and node != root:
        if node.display in BLOCK_DISPLAYS:
            return node
        node = node.parent
    return None


def extract_selection_sibling_text(
    document: PageDocument,
    anchor: Optional[PageElement],
) -> Optional[str]:
    """
    Text of the first substantial sibling after the selection's block.

    Args:
        document: Page snapshot
        anchor: Element holding the start of the selection

    Returns:
        Truncated sibling text, or None when nothing qualifies
    """
    if anchor is None:
        return None

    block = _enclosing_block(document, anchor)
    if block is None:
        logger.debug("Selection is not inside a block element")
        return None

    sibling = block.next_element_sibling
    while sibling is not None:
        text = sibling.text.strip()
        if len(text) > MIN_SIBLING_LENGTH:
            return truncate_text(text)
        sibling = sibling.next_element_sibling
    return None
