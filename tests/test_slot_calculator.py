"""
Tests for slot calculator.
"""

from datetime import date

import pytest

from bookingslots.domain.models import AvailabilityWindow, BookingInterval, HolidaySet, Service
from bookingslots.domain.slot_calculator import SlotCalculator


def _window(start: str = "09:00:00", end: str = "17:00:00") -> AvailabilityWindow:
    return AvailabilityWindow.from_strings(start, end, day_of_week="Monday")


def _booking(start: str, end: str) -> BookingInterval:
    return BookingInterval.from_strings(start, end)


class TestSlotCalculator:
    """Tests for SlotCalculator."""

    def test_slots_without_bookings_use_duration_plus_buffer_cadence(self):
        """75-minute cadence with 60-minute occupancy inside 09:00-17:00."""
        calculator = SlotCalculator()
        service = Service(id=1, duration=60, buffer_time=15)

        slots = calculator.compute_slot_strings(service, _window(), [], date(2023, 10, 16))

        # 16:30 would end at 17:30 and no longer fits
        assert slots == ["09:00", "10:15", "11:30", "12:45", "14:00", "15:15"]

    def test_booked_slot_is_excluded(self):
        """A booking 10:00-11:00 removes exactly the 10:00 slot."""
        calculator = SlotCalculator()
        service = Service(id=1, duration=60, buffer_time=0)

        slots = calculator.compute_slot_strings(
            service,
            _window(),
            [_booking("10:00:00", "11:00:00")],
            date(2023, 10, 16),
        )

        assert "10:00" not in slots
        assert "09:00" in slots
        assert "11:00" in slots
        assert slots == ["09:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]

    def test_holiday_overrides_availability(self):
        """Holidays yield no slots even with an open window and no bookings."""
        calculator = SlotCalculator(holidays=HolidaySet.from_strings(["2023-12-25"]))
        service = Service(id=1, duration=60, buffer_time=15)

        assert calculator.compute_slots(service, _window(), [], date(2023, 12, 25)) == []
        assert calculator.compute_slots(service, _window(), [], "2023-12-25") == []
        assert calculator.compute_slots(service, _window(), [], date(2023, 12, 26)) != []

    def test_absent_availability_yields_no_slots(self):
        calculator = SlotCalculator()
        service = Service(id=1, duration=30)

        assert calculator.compute_slots(service, None, [], date(2023, 10, 16)) == []

    def test_window_shorter_than_duration(self):
        calculator = SlotCalculator()
        service = Service(id=1, duration=90)

        slots = calculator.compute_slots(service, _window("09:00", "10:00"), [], date(2023, 10, 16))

        assert slots == []

    def test_step_larger_than_window_gives_single_slot(self):
        calculator = SlotCalculator()
        service = Service(id=1, duration=60, buffer_time=120)

        slots = calculator.compute_slot_strings(service, _window("09:00", "11:00"), [], date(2023, 10, 16))

        assert slots == ["09:00"]

    def test_slot_touching_bookings_is_available(self):
        """A slot may end when a booking starts and start when one ends."""
        calculator = SlotCalculator()
        service = Service(id=1, duration=60)

        slots = calculator.compute_slot_strings(
            service,
            _window("09:00", "12:00"),
            [_booking("08:00", "09:00"), _booking("10:00", "11:00")],
            date(2023, 10, 16),
        )

        assert slots == ["09:00", "11:00"]

    def test_partial_overlap_excludes_slot(self):
        calculator = SlotCalculator()
        service = Service(id=1, duration=60)

        slots = calculator.compute_slot_strings(
            service,
            _window("09:00", "12:00"),
            [_booking("09:30", "09:45")],
            date(2023, 10, 16),
        )

        assert slots == ["10:00", "11:00"]

    def test_unsorted_bookings(self):
        """Bookings are not required to be sorted."""
        calculator = SlotCalculator()
        service = Service(id=1, duration=30)

        slots = calculator.compute_slot_strings(
            service,
            _window("09:00", "11:00"),
            [_booking("10:30", "11:00"), _booking("09:00", "09:30")],
            date(2023, 10, 16),
        )

        assert slots == ["09:30", "10:00"]

    @pytest.mark.parametrize(
        "duration, buffer_time, start, end",
        [
            (30, 0, "08:00", "18:00"),
            (45, 10, "09:15", "16:40"),
            (60, 15, "09:00", "17:00"),
            (25, 5, "00:00", "24:00"),
        ],
    )
    def test_slots_are_spaced_by_step_and_fit_in_window(self, duration, buffer_time, start, end):
        calculator = SlotCalculator()
        service = Service(id=1, duration=duration, buffer_time=buffer_time)
        window = _window(start, end)

        slots = calculator.compute_slots(service, window, [], date(2023, 10, 16))

        assert slots
        assert slots[0].start_time == window.start_time
        assert all(b.start_time - a.start_time == service.step for a, b in zip(slots, slots[1:]))
        assert all(window.start_time <= s.start_time <= window.end_time - duration for s in slots)
        assert slots[-1].start_time + service.step + duration > window.end_time

    def test_returned_slots_never_overlap_bookings(self):
        calculator = SlotCalculator()
        service = Service(id=1, duration=40, buffer_time=5)
        bookings = [
            _booking("09:10", "09:50"),
            _booking("11:00", "11:05"),
            _booking("13:30", "15:00"),
            _booking("16:44", "16:45"),
        ]

        slots = calculator.compute_slots(service, _window(), bookings, date(2023, 10, 16))

        assert slots
        for slot in slots:
            assert not any(slot.as_interval().overlaps(b) for b in bookings)
        starts = [slot.start_time for slot in slots]
        assert starts == sorted(set(starts))

    def test_booking_ending_mid_minute_blocks_that_minute(self):
        """A booking ending at 10:00:30 still occupies the 10:00 slot."""
        calculator = SlotCalculator()
        service = Service(id=1, duration=60)

        slots = calculator.compute_slot_strings(
            service,
            _window("09:00", "12:00"),
            [_booking("09:00:00", "10:00:30")],
            date(2023, 10, 16),
        )

        assert slots == ["11:00"]
