"""Suggestion models produced by page extraction."""

from typing import Optional

from pydantic import BaseModel


class DateTimeSuggestion(BaseModel):
    """A start (and optional end) instant found on a page."""

    start: str  # ISO string, UTC
    end: Optional[str] = None
    label: str

    def dedup_key(self) -> str:
        return f"{self.start}|{self.end or ''}"


class DescriptionSuggestion(BaseModel):
    """A candidate event description and where it came from."""

    text: str
    source: str  # "Open Graph", "Page content", ...
