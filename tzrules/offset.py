"""Library for parsing and validating fixed UTC offsets.

An offset is the amount of time a zone is ahead (east) or behind (west) of
UTC, stored as whole seconds between -18:00 and +18:00. Offsets on a quarter
hour boundary are interned so that common values, and zero in particular,
are shared instances.
"""

from __future__ import annotations

import datetime
import functools
import re
from dataclasses import dataclass, field
from typing import ClassVar

from .exceptions import OffsetRangeError, ZoneFormatError

__all__ = [
    "Offset",
]

MAX_SECONDS = 18 * 60 * 60
_SECONDS_PER_HOUR = 60 * 60
_SECONDS_PER_MINUTE = 60
_QUARTER_HOUR = 15 * 60

# Accepted forms after the sign: H, HH, HHMM, HH:MM, HHMMSS, HH:MM:SS
_OFFSET_REGEX = re.compile(
    r"(?P<sign>[+-])(?:(?P<hour>[0-9])|(?P<hours>[0-9]{2})"
    r"(?:(?P<colon>:?)(?P<minutes>[0-9]{2})(?:(?P=colon)(?P<seconds>[0-9]{2}))?)?)",
    re.ASCII,
)

# Interning tables consulted at construction time
_ID_CACHE: dict[str, Offset] = {}
_SECONDS_CACHE: dict[int, Offset] = {}


def _build_id(total_seconds: int) -> str:
    """Return the canonical id for the offset total seconds."""
    if total_seconds == 0:
        return "Z"
    abs_seconds = abs(total_seconds)
    hours, remainder = divmod(abs_seconds, _SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, _SECONDS_PER_MINUTE)
    sign = "-" if total_seconds < 0 else "+"
    result = f"{sign}{hours:02}:{minutes:02}"
    if seconds:
        result += f":{seconds:02}"
    return result


def _validate(hours: int, minutes: int, seconds: int) -> None:
    """Validate the offset fields are in range and have a consistent sign."""
    if not -18 <= hours <= 18:
        raise OffsetRangeError(
            f"Zone offset hours not in valid range: value {hours} is not in the range -18 to 18"
        )
    if hours > 0:
        if minutes < 0 or seconds < 0:
            raise OffsetRangeError(
                "Zone offset minutes and seconds must be positive because hours is positive"
            )
    elif hours < 0:
        if minutes > 0 or seconds > 0:
            raise OffsetRangeError(
                "Zone offset minutes and seconds must be negative because hours is negative"
            )
    elif (minutes > 0 and seconds < 0) or (minutes < 0 and seconds > 0):
        raise OffsetRangeError(
            "Zone offset minutes and seconds must have the same sign"
        )
    if not -59 <= minutes <= 59:
        raise OffsetRangeError(
            f"Zone offset minutes not in valid range: value {minutes} is not in the range -59 to 59"
        )
    if not -59 <= seconds <= 59:
        raise OffsetRangeError(
            f"Zone offset seconds not in valid range: value {seconds} is not in the range -59 to 59"
        )
    if abs(hours) == 18 and (minutes or seconds):
        raise OffsetRangeError("Zone offset not in valid range: -18:00 to +18:00")


@functools.total_ordering
@dataclass(frozen=True)
class Offset:
    """A fixed displacement from UTC in whole seconds.

    Offsets sort in descending order of total seconds, so that an offset
    further east comes before one further west.
    """

    total_seconds: int
    """The total offset in seconds, between -64800 and 64800."""

    id: str = field(init=False, repr=False, compare=False)
    """The canonical id, either Z, +HH:MM or +HH:MM:SS."""

    UTC: ClassVar[Offset]
    MIN: ClassVar[Offset]
    MAX: ClassVar[Offset]

    def __new__(cls, total_seconds: int) -> Offset:
        """Return the interned instance for quarter hour offsets."""
        if (cached := _SECONDS_CACHE.get(total_seconds)) is not None:
            return cached
        return super().__new__(cls)

    def __post_init__(self) -> None:
        """Validate the range of the offset, compute the id and intern it."""
        if abs(self.total_seconds) > MAX_SECONDS:
            raise OffsetRangeError("Zone offset not in valid range: -18:00 to +18:00")
        object.__setattr__(self, "id", _build_id(self.total_seconds))
        if self.total_seconds % _QUARTER_HOUR == 0:
            _SECONDS_CACHE.setdefault(self.total_seconds, self)
            _ID_CACHE.setdefault(self.id, self)

    def __reduce__(self) -> tuple[object, tuple[int]]:
        return (Offset.of_total_seconds, (self.total_seconds,))

    @classmethod
    def of_total_seconds(cls, total_seconds: int) -> Offset:
        """Return an offset for the total seconds, validating only the combined range."""
        if abs(total_seconds) > MAX_SECONDS:
            raise OffsetRangeError("Zone offset not in valid range: -18:00 to +18:00")
        return cls(total_seconds)

    @classmethod
    def of_hours(cls, hours: int) -> Offset:
        """Return an offset for a whole number of hours."""
        return cls.of_hours_minutes_seconds(hours, 0, 0)

    @classmethod
    def of_hours_minutes(cls, hours: int, minutes: int) -> Offset:
        """Return an offset for hours and minutes which must share a sign."""
        return cls.of_hours_minutes_seconds(hours, minutes, 0)

    @classmethod
    def of_hours_minutes_seconds(cls, hours: int, minutes: int, seconds: int) -> Offset:
        """Return an offset for hours, minutes and seconds which must share a sign."""
        _validate(hours, minutes, seconds)
        return cls.of_total_seconds(
            hours * _SECONDS_PER_HOUR + minutes * _SECONDS_PER_MINUTE + seconds
        )

    @classmethod
    def from_timedelta(cls, value: datetime.timedelta) -> Offset:
        """Return an offset for a timedelta with no sub-second component."""
        if value.microseconds:
            raise OffsetRangeError(f"Zone offset must be whole seconds: {value}")
        return cls.of_total_seconds(value // datetime.timedelta(seconds=1))

    @classmethod
    def parse(cls, value: str) -> Offset:
        """Parse the offset id text into an Offset.

        The accepted forms are Z, +h, +hh, +hhmm, +hh:mm, +hhmmss and +hh:mm:ss
        with either sign. A field out of range is reported as a format error.
        """
        if (cached := _ID_CACHE.get(value)) is not None:
            return cached
        if value == "Z":
            return cls.UTC
        if not (match := _OFFSET_REGEX.fullmatch(value)):
            raise ZoneFormatError(f"Invalid ID for ZoneOffset, invalid format: {value}")
        sign = -1 if match.group("sign") == "-" else 1
        hours = int(match.group("hours") or match.group("hour"))
        minutes = int(match.group("minutes") or 0)
        seconds = int(match.group("seconds") or 0)
        try:
            return cls.of_hours_minutes_seconds(
                sign * hours, sign * minutes, sign * seconds
            )
        except OffsetRangeError as err:
            raise ZoneFormatError(
                f"Invalid ID for ZoneOffset, out of range: {value}",
                detailed_error=str(err),
            ) from err

    @property
    def hours(self) -> int:
        """Return the hours field, carrying the sign of the offset."""
        return self._sign * (abs(self.total_seconds) // _SECONDS_PER_HOUR)

    @property
    def minutes(self) -> int:
        """Return the minutes field, carrying the sign of the offset."""
        return self._sign * (abs(self.total_seconds) // _SECONDS_PER_MINUTE % 60)

    @property
    def seconds(self) -> int:
        """Return the seconds field, carrying the sign of the offset."""
        return self._sign * (abs(self.total_seconds) % _SECONDS_PER_MINUTE)

    @property
    def _sign(self) -> int:
        return -1 if self.total_seconds < 0 else 1

    def as_timedelta(self) -> datetime.timedelta:
        """Return the offset as a timedelta."""
        return datetime.timedelta(seconds=self.total_seconds)

    def as_timezone(self) -> datetime.timezone:
        """Return a fixed datetime.timezone for this offset."""
        if self.total_seconds == 0:
            return datetime.timezone.utc
        return datetime.timezone(self.as_timedelta())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Offset):
            return NotImplemented
        return self.total_seconds > other.total_seconds

    def __str__(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"Offset({self.id})"


Offset.UTC = Offset.of_total_seconds(0)
Offset.MIN = Offset.of_total_seconds(-MAX_SECONDS)
Offset.MAX = Offset.of_total_seconds(MAX_SECONDS)
