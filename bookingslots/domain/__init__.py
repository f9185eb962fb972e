"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import BookingConflictError, BookingSlotsError, InvalidInputError, NotFoundError
from .models import (
    AvailabilityWindow,
    Booking,
    BookingInterval,
    BookingRequest,
    HolidaySet,
    Service,
    Slot,
)
from .overlap import OverlapDetector, find_conflicts, has_overlap
from .slot_calculator import SlotCalculator

__all__ = [
    "AvailabilityWindow",
    "Booking",
    "BookingConflictError",
    "BookingInterval",
    "BookingRequest",
    "BookingSlotsError",
    "HolidaySet",
    "InvalidInputError",
    "NotFoundError",
    "OverlapDetector",
    "Service",
    "Slot",
    "SlotCalculator",
    "find_conflicts",
    "has_overlap",
]
