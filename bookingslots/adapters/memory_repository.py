"""
In-memory booking repository backed by an optional YAML data file.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional, Tuple

import yaml

from ..domain.clock import format_clock_seconds, parse_date
from ..domain.exceptions import InvalidInputError
from ..domain.models import AvailabilityWindow, Booking, BookingInterval, Service

logger = logging.getLogger(__name__)


def _clock_field(value):
    # YAML 1.1 reads unquoted 10:00:00 as sexagesimal seconds
    if isinstance(value, int) and not isinstance(value, bool):
        return timedelta(seconds=value)
    return value


class InMemoryBookingRepository:
    """
    Stores services, availability windows and bookings in memory.

    Implements BookingRepositoryProtocol. The read-check-write sequence of
    booking creation is serialised per (service_id, booking_date) with one
    asyncio.Lock per key, dropped once no task holds or awaits it.
    """

    def __init__(
        self,
        services: Optional[List[Service]] = None,
        availability: Optional[Dict[Tuple[int, str], AvailabilityWindow]] = None,
        bookings: Optional[List[Booking]] = None,
    ):
        self._services: Dict[int, Service] = {s.id: s for s in services or []}
        self._availability: Dict[Tuple[int, str], AvailabilityWindow] = dict(availability or {})
        self._bookings: List[Booking] = list(bookings or [])
        self._next_id = max((b.id for b in self._bookings), default=0) + 1
        self._locks: Dict[Tuple[int, date], asyncio.Lock] = {}
        self._lock_users: Dict[Tuple[int, date], int] = {}

    @classmethod
    def from_yaml(cls, data_path: Path) -> "InMemoryBookingRepository":
        """
        Load repository contents from a YAML data file.

        Raises:
            FileNotFoundError: If the data file doesn't exist
            InvalidInputError: If the data file is malformed
        """
        if not data_path.exists():
            raise FileNotFoundError(f"Data file not found: {data_path}")

        try:
            with open(data_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise InvalidInputError(f"Invalid YAML in {data_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise InvalidInputError("Data file must contain a mapping at the root level.")

        try:
            return cls.from_dict(data)
        except (KeyError, TypeError) as exc:
            raise InvalidInputError(f"Malformed data file {data_path}: {exc!r}") from exc

    @classmethod
    def from_dict(cls, data: dict) -> "InMemoryBookingRepository":
        services = [
            Service(
                id=int(row["id"]),
                duration=row["duration"],
                buffer_time=row.get("buffer_time", 0),
                name=row.get("name", ""),
                description=row.get("description", ""),
                price=row.get("price"),
            )
            for row in data.get("services") or []
        ]

        availability: Dict[Tuple[int, str], AvailabilityWindow] = {}
        for row in data.get("availability") or []:
            window = AvailabilityWindow.from_strings(
                _clock_field(row["start_time"]),
                _clock_field(row["end_time"]),
                day_of_week=row["day_of_week"],
            )
            key = (int(row["service_id"]), window.day_of_week)
            if key in availability:
                raise InvalidInputError(
                    f"Duplicate availability for service {key[0]} on {key[1]}"
                )
            availability[key] = window

        bookings = [
            Booking(
                id=int(row["id"]),
                user_id=int(row["user_id"]),
                service_id=int(row["service_id"]),
                booking_date=parse_date(row["booking_date"]),
                interval=BookingInterval.from_strings(
                    _clock_field(row["start_time"]),
                    _clock_field(row["end_time"]),
                ),
            )
            for row in data.get("bookings") or []
        ]

        return cls(services=services, availability=availability, bookings=bookings)

    def to_dict(self) -> dict:
        return {
            "services": [
                {
                    "id": s.id,
                    "name": s.name,
                    "description": s.description,
                    "duration": s.duration,
                    "buffer_time": s.buffer_time,
                    "price": s.price,
                }
                for s in self._services.values()
            ],
            "availability": [
                {
                    "service_id": service_id,
                    "day_of_week": day_of_week,
                    "start_time": format_clock_seconds(window.start_time),
                    "end_time": format_clock_seconds(window.end_time),
                }
                for (service_id, day_of_week), window in self._availability.items()
            ],
            "bookings": [b.to_dict() for b in self._bookings],
        }

    def save(self, data_path: Path) -> None:
        """Write repository contents back to a YAML data file."""
        with open(data_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        logger.debug("Saved %d booking(s) to %s", len(self._bookings), data_path)

    async def get_service(self, service_id: int) -> Optional[Service]:
        return self._services.get(service_id)

    async def list_services(self) -> List[Service]:
        return list(self._services.values())

    async def get_availability(
        self,
        service_id: int,
        day_of_week: str,
    ) -> Optional[AvailabilityWindow]:
        return self._availability.get((service_id, day_of_week.title()))

    async def list_bookings(
        self,
        service_id: Optional[int] = None,
        booking_date: Optional[date] = None,
    ) -> List[Booking]:
        return [
            booking for booking in self._bookings
            if (service_id is None or booking.service_id == service_id)
            and (booking_date is None or booking.booking_date == booking_date)
        ]

    async def add_booking(
        self,
        *,
        user_id: int,
        service_id: int,
        booking_date: date,
        interval: BookingInterval,
    ) -> Booking:
        booking = Booking(
            id=self._next_id,
            user_id=user_id,
            service_id=service_id,
            booking_date=booking_date,
            interval=interval,
        )
        self._next_id += 1
        self._bookings.append(booking)
        return booking

    def set_availability(self, service_id: int, window: AvailabilityWindow) -> None:
        """Register the opening window of a service for the window's weekday."""
        if not window.day_of_week:
            raise InvalidInputError("Availability window needs a day_of_week")
        self._availability[(service_id, window.day_of_week)] = window

    @asynccontextmanager
    async def transaction(self, service_id: int, booking_date: date) -> AsyncIterator[None]:
        key = (service_id, booking_date)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]
