"""Custom exceptions for Send to Calendar."""

from typing import Optional


class SendToCalError(Exception):
    """Base exception for send-to-cal errors."""


class ConfigurationError(SendToCalError):
    """Raised when configuration is invalid or missing."""


class EventValidationError(SendToCalError):
    """Raised when a draft cannot be turned into a valid event."""


class ExtractionError(SendToCalError):
    """Raised when an extraction function fails inside the page context."""


class CalendarWriteError(SendToCalError):
    """Raised when the CalDAV server rejects an event."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
