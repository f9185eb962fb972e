"""
Domain models for services, availability windows, bookings and slots.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, Optional, Union

from .clock import ClockValue, format_clock, format_clock_seconds, parse_clock, parse_date
from .exceptions import InvalidInputError

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def _check_interval(start_time: int, end_time: int) -> None:
    if start_time >= end_time:
        raise InvalidInputError(
            f"Start time {format_clock(start_time)} must be before "
            f"end time {format_clock(end_time)}"
        )


@dataclass(frozen=True)
class Service:
    """
    A bookable service.

    Invariant: duration is positive, buffer_time is non-negative.
    """
    id: int
    duration: int
    buffer_time: int = 0
    name: str = ""
    description: str = ""
    price: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.duration, bool) or not isinstance(self.duration, int) or self.duration <= 0:
            raise InvalidInputError(
                f"Service duration must be a positive number of minutes, got {self.duration!r}"
            )
        if isinstance(self.buffer_time, bool) or not isinstance(self.buffer_time, int) or self.buffer_time < 0:
            raise InvalidInputError(
                f"Service buffer_time must be a non-negative number of minutes, got {self.buffer_time!r}"
            )

    @property
    def step(self) -> int:
        """Minutes between two consecutive slot starts."""
        return self.duration + self.buffer_time


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    Opening hours of a service on one day of the week.

    Invariant: start_time must be before end_time.
    """
    start_time: int
    end_time: int
    day_of_week: str = ""

    def __post_init__(self):
        _check_interval(self.start_time, self.end_time)
        if self.day_of_week:
            normalized = self.day_of_week.strip().title()
            if normalized not in WEEKDAYS:
                raise InvalidInputError(f"Unknown day of week: {self.day_of_week!r}")
            object.__setattr__(self, "day_of_week", normalized)

    @classmethod
    def from_strings(
        cls,
        start_time: ClockValue,
        end_time: ClockValue,
        day_of_week: str = "",
    ) -> "AvailabilityWindow":
        return cls(
            start_time=parse_clock(start_time),
            end_time=parse_clock(end_time),
            day_of_week=day_of_week,
        )

    def duration_minutes(self) -> int:
        """Return the length of the window in minutes."""
        return self.end_time - self.start_time

    def __str__(self) -> str:
        return f"{self.day_of_week} {format_clock(self.start_time)} - {format_clock(self.end_time)}".strip()


@dataclass(frozen=True)
class BookingInterval:
    """
    Half-open interval [start_time, end_time) occupied by a booking.

    Invariant: start_time must be before end_time.
    """
    start_time: int
    end_time: int

    def __post_init__(self):
        _check_interval(self.start_time, self.end_time)

    @classmethod
    def from_strings(cls, start_time: ClockValue, end_time: ClockValue) -> "BookingInterval":
        # Ends round up so a booking with seconds still covers its last minute
        return cls(
            start_time=parse_clock(start_time),
            end_time=parse_clock(end_time, round_up=True),
        )

    def overlaps(self, other: "BookingInterval") -> bool:
        """Check if this interval overlaps another. Touching endpoints do not."""
        return self.start_time < other.end_time and self.end_time > other.start_time

    def __str__(self) -> str:
        return f"{format_clock(self.start_time)} - {format_clock(self.end_time)}"


@dataclass(frozen=True)
class Booking:
    """A confirmed booking of a service on a calendar date."""
    id: int
    user_id: int
    service_id: int
    booking_date: date
    interval: BookingInterval

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "service_id": self.service_id,
            "booking_date": self.booking_date.isoformat(),
            "start_time": format_clock_seconds(self.interval.start_time),
            "end_time": format_clock_seconds(self.interval.end_time),
        }


@dataclass(frozen=True)
class BookingRequest:
    """Caller input for creating a booking, as exchanged over the wire."""
    user_id: int
    service_id: int
    booking_date: Union[str, date]
    start_time: ClockValue
    end_time: ClockValue

    def __post_init__(self):
        for name in ("user_id", "service_id"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidInputError(f"{name} must be a positive integer, got {value!r}")

    def parsed_date(self) -> date:
        return parse_date(self.booking_date)

    def to_interval(self) -> BookingInterval:
        return BookingInterval.from_strings(self.start_time, self.end_time)


@dataclass(frozen=True)
class Slot:
    """A bookable start time, spanning `duration` minutes."""
    start_time: int
    duration: int

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def as_interval(self) -> BookingInterval:
        return BookingInterval(start_time=self.start_time, end_time=self.end_time)

    def format_display(self) -> str:
        """Format the slot start as HH:MM."""
        return format_clock(self.start_time)


@dataclass(frozen=True)
class HolidaySet:
    """Calendar dates on which no slots are offered."""
    dates: FrozenSet[date] = field(default_factory=frozenset)

    @classmethod
    def from_strings(cls, values: Iterable[Union[str, date]]) -> "HolidaySet":
        return cls(dates=frozenset(parse_date(value) for value in values))

    def is_holiday(self, day: date) -> bool:
        return day in self.dates

    def __contains__(self, day: object) -> bool:
        return day in self.dates

    def __len__(self) -> int:
        return len(self.dates)
