"""Calendar event data model."""

from typing import Optional

from pydantic import BaseModel


class CalendarEvent(BaseModel):
    """Finalized event handed to the codec and transport.

    ``start`` and ``end`` are ISO-8601 instants for timed events and
    ``YYYY-MM-DD`` dates for all-day events. The all-day ``end`` is the
    inclusive last day.
    """

    title: str
    start: str
    end: str
    all_day: bool = False
    description: Optional[str] = None
    url: Optional[str] = None

    model_config = {"frozen": True}
