"""
Time-of-day and calendar-date helpers.

All times of day are handled as integer minute offsets from midnight on an
abstract reference day. Keeping them as plain integers means no timezone or
daylight-saving rules can shift a slot, and half-open interval comparisons
reduce to integer comparisons.
"""

import re
from datetime import date, time, timedelta
from typing import Union

import pendulum

from .exceptions import InvalidInputError

MINUTES_PER_DAY = 24 * 60

ClockValue = Union[str, time, timedelta, int]

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_clock(value: ClockValue, round_up: bool = False) -> int:
    """
    Convert a time-of-day value to minutes since midnight.

    Accepts ``HH:MM`` / ``HH:MM:SS`` strings, ``datetime.time``,
    ``datetime.timedelta`` (as returned by MySQL drivers for ``TIME``
    columns) and ints that already hold minutes. Seconds are truncated, or
    rounded up to the next minute with ``round_up`` (used for interval ends,
    so an interval never shrinks).
    ``24:00`` is accepted as the end of the day.

    Raises:
        InvalidInputError: If the value is not a valid time of day
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid time of day: {value!r}")

    partial = False

    if isinstance(value, int):
        minutes = value
    elif isinstance(value, time):
        if value.tzinfo is not None:
            raise InvalidInputError(f"Time of day must not carry a timezone: {value}")
        minutes = value.hour * 60 + value.minute
        partial = bool(value.second or value.microsecond)
    elif isinstance(value, timedelta):
        minutes, rest = divmod(value, timedelta(minutes=1))
        partial = bool(rest)
    elif isinstance(value, str):
        match = _CLOCK_PATTERN.match(value.strip())
        if not match:
            raise InvalidInputError(
                f"Invalid time of day: {value!r}. Expected HH:MM or HH:MM:SS."
            )
        hours, mins, secs = (int(part) if part else 0 for part in match.groups())
        if mins > 59 or secs > 59:
            raise InvalidInputError(f"Invalid time of day: {value!r}")
        minutes = hours * 60 + mins
        if minutes == MINUTES_PER_DAY and secs:
            raise InvalidInputError(f"Invalid time of day: {value!r}")
        partial = bool(secs)
    else:
        raise InvalidInputError(
            f"Unsupported time of day type: {type(value).__name__}"
        )

    if round_up and partial:
        minutes += 1

    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise InvalidInputError(f"Time of day out of range: {value!r}")
    return minutes


def format_clock(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def format_clock_seconds(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM:SS``."""
    return f"{format_clock(minutes)}:00"


def parse_date(value: Union[str, date]) -> date:
    """
    Parse an ISO ``YYYY-MM-DD`` calendar date.

    Raises:
        InvalidInputError: If the value is not a valid date
    """
    if isinstance(value, date):
        return value if type(value) is date else date(value.year, value.month, value.day)

    if not isinstance(value, str):
        raise InvalidInputError(f"Unsupported date type: {type(value).__name__}")

    try:
        parsed = pendulum.from_format(value.strip(), "YYYY-MM-DD")
    except ValueError as exc:
        raise InvalidInputError(
            f"Invalid date: {value!r}. Expected YYYY-MM-DD."
        ) from exc

    return date(parsed.year, parsed.month, parsed.day)


def weekday_name(value: date) -> str:
    """Return the English weekday name for a date, e.g. ``Sunday``."""
    return pendulum.date(value.year, value.month, value.day).format("dddd", locale="en")
