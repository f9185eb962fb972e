"""
Application services for booking and availability lookups.

The service coordinates loading services, availability windows and bookings
via a repository adapter and delegates the actual slot and conflict logic to
the domain-level ``SlotCalculator`` and ``OverlapDetector``. This keeps the
CLI thin and allows the repository to be swapped out in tests via a simple
protocol.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import AsyncContextManager, List, Optional, Protocol, Union

from ..domain.clock import parse_date, weekday_name
from ..domain.exceptions import BookingConflictError, NotFoundError
from ..domain.models import AvailabilityWindow, Booking, BookingInterval, BookingRequest, Service
from ..domain.overlap import OverlapDetector
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class BookingRepositoryProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    async def get_service(self, service_id: int) -> Optional[Service]:
        """Return the service or None if it does not exist."""

    async def list_services(self) -> List[Service]:
        """Return all services."""

    async def get_availability(
        self,
        service_id: int,
        day_of_week: str,
    ) -> Optional[AvailabilityWindow]:
        """Return the service's window for a weekday, if any."""

    async def list_bookings(
        self,
        service_id: Optional[int] = None,
        booking_date: Optional[date] = None,
    ) -> List[Booking]:
        """Return bookings, optionally filtered by service and date."""

    async def add_booking(
        self,
        *,
        user_id: int,
        service_id: int,
        booking_date: date,
        interval: BookingInterval,
    ) -> Booking:
        """Persist a booking and return it with its new identifier."""

    def transaction(self, service_id: int, booking_date: date) -> AsyncContextManager[None]:
        """
        Serialise read-check-write sequences for one service and date.

        Implementations must guarantee that two callers holding the
        transaction for the same key never interleave.
        """


class BookingService:
    """
    Orchestrates repository access, slot calculation and conflict checks.
    """

    def __init__(
        self,
        repository: BookingRepositoryProtocol,
        slot_calculator: SlotCalculator,
        overlap_detector: Optional[OverlapDetector] = None,
    ) -> None:
        self._repository = repository
        self._slot_calculator = slot_calculator
        self._overlap_detector = overlap_detector or OverlapDetector()

    async def get_available_slots(
        self,
        *,
        service_id: int,
        on_date: Union[date, str],
    ) -> List[str]:
        """
        Compute the open slots of a service on a date, as HH:MM strings.

        Raises:
            InvalidInputError: If the date is malformed
            NotFoundError: If the service does not exist
        """
        day = parse_date(on_date)
        service = await self._require_service(service_id)

        availability = await self._repository.get_availability(service.id, weekday_name(day))
        bookings = await self._repository.list_bookings(service_id=service.id, booking_date=day)

        return self._slot_calculator.compute_slot_strings(
            service,
            availability,
            [booking.interval for booking in bookings],
            day,
        )

    async def create_booking(self, request: BookingRequest) -> Booking:
        """
        Validate a booking request, reject conflicts and persist it.

        Raises:
            InvalidInputError: If the date or times are malformed
            NotFoundError: If the service does not exist
            BookingConflictError: If the booking overlaps an existing one
        """
        day = request.parsed_date()
        interval = request.to_interval()
        service = await self._require_service(request.service_id)

        async with self._repository.transaction(service.id, day):
            existing = await self._repository.list_bookings(service_id=service.id, booking_date=day)
            conflicts = self._overlap_detector.find_conflicts(
                interval,
                [booking.interval for booking in existing],
            )

            if conflicts:
                logger.info(
                    "Rejected booking for service %s on %s at %s: %d conflict(s)",
                    service.id,
                    day,
                    interval,
                    len(conflicts),
                )
                raise BookingConflictError(
                    f"Booking {interval} on {day.isoformat()} overlaps existing booking(s): "
                    + ", ".join(str(conflict) for conflict in conflicts),
                    conflicts=conflicts,
                )

            booking = await self._repository.add_booking(
                user_id=request.user_id,
                service_id=service.id,
                booking_date=day,
                interval=interval,
            )

        logger.info(
            "Created booking %s for service %s on %s at %s",
            booking.id,
            service.id,
            day,
            interval,
        )
        return booking

    async def list_bookings(self) -> List[Booking]:
        """Return all bookings."""
        return await self._repository.list_bookings()

    async def list_services(self) -> List[Service]:
        """Return all services."""
        return await self._repository.list_services()

    async def _require_service(self, service_id: int) -> Service:
        service = await self._repository.get_service(service_id)
        if service is None:
            raise NotFoundError(f"Service {service_id} not found")
        return service
