"""
Adapters layer - Storage backends for services, availability and bookings.
"""

from .memory_repository import InMemoryBookingRepository

__all__ = ["InMemoryBookingRepository"]
