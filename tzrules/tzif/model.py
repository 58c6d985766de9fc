"""Data model for the tzif library."""

from collections import namedtuple
from dataclasses import dataclass, field
from typing import Optional

from .tz_rule import Rule


@dataclass
class LocalTimeType:
    """A local time type record referenced by transitions."""

    utoff: int
    """Number of seconds added to UTC to determine local time."""

    dst: bool
    """Determines if local time is Daylight Savings Time (else Standard time)."""

    designation: str
    """A designation string, e.g. GMT or BST."""


@dataclass
class TransitionRecord:
    """An individual transition item in the data block."""

    transition_time: int
    """A transition time in seconds since the epoch at which local time may change."""

    local_time_type: LocalTimeType
    """The local time type in effect starting at the transition time."""

    isstdcnt: bool
    """Determines if the transition time is standard time (else, wall clock time)."""

    isutccnt: bool
    """Determines if the transition time is UTC time, else is a local time."""


LeapSecond = namedtuple("LeapSecond", ["occurrence", "correction"])
"""A correction that needs to be applied to UTC in order to determine TAI.

The occurrence is the time at which the leap-second correction occurs.
The correction is the value of LEAPCORR on or after the occurrence (1 or -1).
"""


@dataclass
class TimezoneInfo:
    """The results of parsing the TZif file."""

    transitions: list[TransitionRecord]
    """Local time changes in ascending order."""

    leap_seconds: list[LeapSecond] = field(default_factory=list)

    initial_type: Optional[LocalTimeType] = None
    """The local time type in effect before the first transition (time type 0)."""

    rule: Optional[Rule] = None
    """A rule for computing local time changes after the last transition."""
