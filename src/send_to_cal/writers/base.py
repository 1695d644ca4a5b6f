"""Abstract base class for calendar writers."""

from abc import ABC, abstractmethod

from ..models.event import CalendarEvent


class CalendarWriter(ABC):
    """Abstract base class for calendar writers."""

    @abstractmethod
    def check_connection(self) -> bool:
        """
        Check that the calendar is reachable with the configured credentials.

        Returns:
            True if the server accepted the probe; never raises
        """

    @abstractmethod
    def create_event(self, event: CalendarEvent) -> str:
        """
        Create a new event.

        Args:
            event: CalendarEvent to create

        Returns:
            Location of the created resource

        Raises:
            CalendarWriteError: If the server rejects the event
        """
