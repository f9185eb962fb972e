"""
Core business logic for calculating available booking slots.

Pure domain logic without any external dependencies (no database, no I/O).
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Union

from .clock import parse_date
from .models import AvailabilityWindow, BookingInterval, HolidaySet, Service, Slot
from .overlap import has_overlap

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates bookable slot start times for one service on one date.

    Algorithm:
    1. Holidays yield no slots, whatever the availability
    2. No availability window yields no slots
    3. Generate candidate starts every duration + buffer_time minutes
       from the window start, as long as the slot fits in the window
    4. Keep candidates whose [start, start + duration) overlaps no booking
    """

    def __init__(self, holidays: Optional[HolidaySet] = None):
        self.holidays = holidays or HolidaySet()

    def compute_slots(
        self,
        service: Service,
        availability: Optional[AvailabilityWindow],
        bookings: Sequence[BookingInterval],
        on_date: Union[date, str],
    ) -> List[Slot]:
        """
        Compute the available slots.

        Args:
            service: Service providing duration and buffer time
            availability: Opening window for the date's weekday, or None
            bookings: Intervals already booked for this service and date
            on_date: Calendar date, only used for the holiday check

        Returns:
            Slots in strictly increasing start time order
        """
        day = parse_date(on_date)

        if self.holidays.is_holiday(day):
            logger.debug("No slots for service %s: %s is a holiday", service.id, day)
            return []

        if availability is None:
            logger.debug("No slots for service %s: no availability on %s", service.id, day)
            return []

        candidates = self._generate_candidates(service, availability)

        slots = [
            slot for slot in candidates
            if self._is_free(slot.as_interval(), bookings)
        ]

        logger.debug(
            "Service %s on %s: %d candidate(s), %d available",
            service.id,
            day,
            len(candidates),
            len(slots),
        )
        return slots

    def compute_slot_strings(
        self,
        service: Service,
        availability: Optional[AvailabilityWindow],
        bookings: Sequence[BookingInterval],
        on_date: Union[date, str],
    ) -> List[str]:
        """Same as compute_slots, formatted as HH:MM strings."""
        return [
            slot.format_display()
            for slot in self.compute_slots(service, availability, bookings, on_date)
        ]

    @staticmethod
    def _generate_candidates(
        service: Service,
        availability: AvailabilityWindow,
    ) -> List[Slot]:
        candidates: List[Slot] = []
        current = availability.start_time

        while current + service.duration <= availability.end_time:
            candidates.append(Slot(start_time=current, duration=service.duration))
            current += service.step

        return candidates

    @staticmethod
    def _is_free(
        candidate: BookingInterval,
        bookings: Sequence[BookingInterval],
    ) -> bool:
        # Half-open: a slot may end exactly when a booking starts, or start when one ends
        return not has_overlap(candidate, bookings)
