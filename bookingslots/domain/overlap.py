"""
Booking conflict detection.

Two intervals [a.start, a.end) and [b.start, b.end) conflict iff
a.start < b.end and a.end > b.start. Touching intervals do not conflict.
"""

from typing import Iterable, List

from .models import BookingInterval


def find_conflicts(
    candidate: BookingInterval,
    existing: Iterable[BookingInterval],
) -> List[BookingInterval]:
    """Return every existing interval the candidate overlaps, in input order."""
    return [interval for interval in existing if candidate.overlaps(interval)]


def has_overlap(
    candidate: BookingInterval,
    existing: Iterable[BookingInterval],
) -> bool:
    """Check whether the candidate overlaps any existing interval."""
    return any(candidate.overlaps(interval) for interval in existing)


class OverlapDetector:
    """Injectable wrapper around the module-level conflict checks."""

    def has_overlap(
        self,
        candidate: BookingInterval,
        existing: Iterable[BookingInterval],
    ) -> bool:
        return has_overlap(candidate, existing)

    def find_conflicts(
        self,
        candidate: BookingInterval,
        existing: Iterable[BookingInterval],
    ) -> List[BookingInterval]:
        return find_conflicts(candidate, existing)
