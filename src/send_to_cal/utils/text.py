"""Text helpers shared by extraction and description assembly."""

from typing import Optional

MAX_DESCRIPTION_LENGTH = 500
ELLIPSIS = "…"


def truncate_text(text: str, max_length: int = MAX_DESCRIPTION_LENGTH) -> str:
    """
    Trim ``text`` and shorten it to ``max_length`` characters.

    When the cut falls mid-word, the text is shortened to the last space
    instead, as long as that space lies in the second half of the cut.
    A single ellipsis character marks the truncation.

    Args:
        text: Raw text
        max_length: Maximum length before the ellipsis

    Returns:
        Trimmed, possibly truncated text
    """
    trimmed = text.strip()
    if len(trimmed) <= max_length:
        return trimmed

    cut = trimmed[:max_length]
    last_space = cut.rfind(" ")
    if last_space > max_length * 0.5:
        cut = cut[:last_space]
    return f"{cut}{ELLIPSIS}"


def build_description(body: str, url: Optional[str] = None) -> str:
    """Join a description body and a ``Source: <url>`` footer with a blank line."""
    parts = []
    if body.strip():
        parts.append(body.strip())
    if url:
        parts.append(f"Source: {url}")
    return "\n\n".join(parts)
