"""
Tests for the BookingService orchestration layer.
"""

import asyncio
from datetime import date

import pytest

from bookingslots.adapters.memory_repository import InMemoryBookingRepository
from bookingslots.domain.exceptions import BookingConflictError, InvalidInputError, NotFoundError
from bookingslots.domain.models import AvailabilityWindow, BookingRequest, HolidaySet, Service
from bookingslots.domain.slot_calculator import SlotCalculator
from bookingslots.services.booking_service import BookingService


class SlowRepository(InMemoryBookingRepository):
    """Repository that yields to the event loop like real I/O would."""

    async def list_bookings(self, service_id=None, booking_date=None):
        await asyncio.sleep(0)
        return await super().list_bookings(service_id=service_id, booking_date=booking_date)

    async def add_booking(self, **kwargs):
        await asyncio.sleep(0)
        return await super().add_booking(**kwargs)


def _build_service(repository_cls=InMemoryBookingRepository, holidays=()) -> BookingService:
    repository = repository_cls(services=[Service(id=1, duration=60, buffer_time=15, name="Test Service")])
    repository.set_availability(1, AvailabilityWindow.from_strings("09:00:00", "17:00:00", "Sunday"))
    repository.set_availability(1, AvailabilityWindow.from_strings("09:00:00", "17:00:00", "Monday"))
    calculator = SlotCalculator(holidays=HolidaySet.from_strings(holidays))
    return BookingService(repository=repository, slot_calculator=calculator)


def _request(start: str, end: str, user_id: int = 1, booking_date: str = "2023-10-16", service_id: int = 1):
    return BookingRequest(
        user_id=user_id,
        service_id=service_id,
        booking_date=booking_date,
        start_time=start,
        end_time=end,
    )


def test_available_slots_for_weekday_window():
    """2023-10-15 is a Sunday with a 09:00-17:00 window."""
    service = _build_service()

    slots = asyncio.run(service.get_available_slots(service_id=1, on_date="2023-10-15"))

    assert slots == ["09:00", "10:15", "11:30", "12:45", "14:00", "15:15"]


def test_no_window_for_weekday_gives_empty_list():
    """2023-10-17 is a Tuesday without availability."""
    service = _build_service()

    assert asyncio.run(service.get_available_slots(service_id=1, on_date="2023-10-17")) == []


def test_holiday_gives_empty_list():
    service = _build_service(holidays=["2023-12-25"])

    assert asyncio.run(service.get_available_slots(service_id=1, on_date="2023-12-25")) == []


def test_unknown_service_raises_not_found():
    service = _build_service()

    with pytest.raises(NotFoundError):
        asyncio.run(service.get_available_slots(service_id=99, on_date="2023-10-15"))

    with pytest.raises(NotFoundError):
        asyncio.run(service.create_booking(_request("10:00", "11:00", service_id=99)))


def test_invalid_date_raises_invalid_input():
    service = _build_service()

    with pytest.raises(InvalidInputError):
        asyncio.run(service.get_available_slots(service_id=1, on_date="invalid-date"))


def test_create_booking_removes_slot_only_on_that_date():
    service = _build_service()

    booking = asyncio.run(service.create_booking(_request("10:15:00", "11:15:00")))

    assert booking.id == 1
    assert booking.booking_date == date(2023, 10, 16)
    monday = asyncio.run(service.get_available_slots(service_id=1, on_date="2023-10-16"))
    sunday = asyncio.run(service.get_available_slots(service_id=1, on_date="2023-10-15"))
    assert "10:15" not in monday
    assert "10:15" in sunday


def test_overlapping_booking_is_rejected():
    service = _build_service()
    asyncio.run(service.create_booking(_request("10:00:00", "11:00:00")))

    with pytest.raises(BookingConflictError, match="overlaps") as exc_info:
        asyncio.run(service.create_booking(_request("10:30:00", "11:30:00", user_id=2)))

    assert [str(c) for c in exc_info.value.conflicts] == ["10:00 - 11:00"]
    assert len(asyncio.run(service.list_bookings())) == 1


def test_touching_booking_is_accepted():
    service = _build_service()
    asyncio.run(service.create_booking(_request("10:00:00", "11:00:00")))

    booking = asyncio.run(service.create_booking(_request("11:00:00", "12:00:00", user_id=2)))

    assert booking.id == 2


def test_same_times_on_other_date_do_not_conflict():
    service = _build_service()
    asyncio.run(service.create_booking(_request("10:00:00", "11:00:00")))

    booking = asyncio.run(service.create_booking(_request("10:00:00", "11:00:00", booking_date="2023-10-17")))

    assert booking.id == 2


def test_concurrent_overlapping_bookings_only_one_succeeds():
    """The read-check-write sequence is serialised per service and date."""
    service = _build_service(repository_cls=SlowRepository)

    async def attempt_all():
        return await asyncio.gather(
            service.create_booking(_request("10:00:00", "11:00:00", user_id=1)),
            service.create_booking(_request("10:30:00", "11:30:00", user_id=2)),
            service.create_booking(_request("10:45:00", "11:15:00", user_id=3)),
            return_exceptions=True,
        )

    results = asyncio.run(attempt_all())

    created = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, BookingConflictError)]
    assert len(created) == 1
    assert len(rejected) == 2
    assert len(asyncio.run(service.list_bookings())) == 1


def test_list_services():
    service = _build_service()

    services = asyncio.run(service.list_services())

    assert [s.name for s in services] == ["Test Service"]
