"""Exceptions raised while validating and persisting records."""
from typing import Optional


class EventsError(Exception):
    """Base exception for event and booking operations."""

    code = 'EventsError'


class ValidationError(EventsError):
    """Raised when a field is missing, empty or malformed."""

    code = 'ValidationFailed'

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidDateError(EventsError):
    """Raised when a date string cannot be parsed."""

    code = 'InvalidDate'


class InvalidTimeError(EventsError):
    """Raised when a time string does not match the accepted format."""

    code = 'InvalidTime'


class TimeOutOfRangeError(EventsError):
    """Raised when a parsed time has an hour or minute out of range."""

    code = 'TimeOutOfRange'


class DuplicateKeyError(EventsError):
    """Raised when an event slug is already claimed by another event."""

    code = 'DuplicateKey'


class DanglingReferenceError(EventsError):
    """Raised when a booking references an event that does not exist."""

    code = 'DanglingReference'


class StoreUnavailableError(EventsError):
    """Raised when the document store cannot be reached or fails."""

    code = 'StoreUnavailable'
