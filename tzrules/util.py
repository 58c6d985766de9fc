"""Utility methods used by multiple components.

Local date-times are naive `datetime.datetime` values and instants are
timezone aware `datetime.datetime` values. These helpers convert between
the two using whole epoch seconds.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .offset import Offset

__all__ = [
    "EPOCH",
    "epoch_seconds",
    "as_local",
    "local_epoch_seconds",
    "local_from_epoch",
    "to_instant",
    "format_local",
]

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)
_LOCAL_EPOCH = datetime.datetime(1970, 1, 1)
_ONE_SECOND = datetime.timedelta(seconds=1)


def epoch_seconds(instant: datetime.datetime) -> int:
    """Return the whole seconds since the epoch, rounding down, for an instant."""
    if instant.utcoffset() is None:
        raise ValueError(f"Instant must be timezone aware: {instant}")
    return (instant - EPOCH) // _ONE_SECOND


def as_local(value: datetime.datetime) -> datetime.datetime:
    """Return the wall clock fields of the datetime, dropping any tzinfo."""
    if value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def local_epoch_seconds(local: datetime.datetime, offset: Offset) -> int:
    """Return the epoch seconds of a local date-time interpreted at the offset."""
    return (as_local(local) - _LOCAL_EPOCH) // _ONE_SECOND - offset.total_seconds


def local_from_epoch(epoch_second: int, offset: Offset) -> datetime.datetime:
    """Return the local date-time at the offset for the seconds since the epoch."""
    return _LOCAL_EPOCH + datetime.timedelta(seconds=epoch_second + offset.total_seconds)


def to_instant(local: datetime.datetime, offset: Offset) -> datetime.datetime:
    """Return the UTC instant for the local date-time at the offset."""
    return (as_local(local) - offset.as_timedelta()).replace(tzinfo=datetime.UTC)


def format_local(local: datetime.datetime) -> str:
    """Render a local date-time in ISO-8601 form.

    Seconds are only included when non-zero and the fraction only when there
    are microseconds, e.g. 2008-03-30T01:00.
    """
    result = (
        f"{local.year:04}-{local.month:02}-{local.day:02}"
        f"T{local.hour:02}:{local.minute:02}"
    )
    if local.second or local.microsecond:
        result += f":{local.second:02}"
        if local.microsecond:
            result += f".{local.microsecond:06}"
    return result
