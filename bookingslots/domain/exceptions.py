"""
Domain-specific exception hierarchy for the booking service.
"""

from __future__ import annotations

from typing import Sequence


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(BookingSlotsError, ValueError):
    """Raised when a time, date or service definition is malformed."""


class NotFoundError(BookingSlotsError):
    """Raised when a referenced service does not exist."""


class BookingConflictError(BookingSlotsError):
    """Raised when a new booking overlaps an existing one."""

    def __init__(self, message: str, conflicts: Sequence[object] = ()):
        super().__init__(message)
        self.conflicts = list(conflicts)
