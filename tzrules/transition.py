"""A single discontinuity in the offset history of a zone.

A transition is modelled by the local date-time at which clocks change
along with the offset in effect before and after. When clocks move forward
there is a gap of local times that never occur, and when they move back
there is an overlap of local times that occur twice.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from .offset import Offset
from .util import (
    as_local,
    format_local,
    local_epoch_seconds,
    local_from_epoch,
    to_instant,
)

__all__ = [
    "Transition",
]


@dataclass(frozen=True)
class Transition:
    """A transition between two offsets at a local date-time."""

    anchor: datetime.datetime
    """The local date-time of the transition expressed in the offset before."""

    offset_before: Offset
    """The offset in effect before the transition."""

    offset_after: Offset
    """The offset in effect after the transition."""

    def __post_init__(self) -> None:
        """Validate the transition offsets and normalize the anchor."""
        if self.offset_before == self.offset_after:
            raise ValueError("Offsets must not be equal")
        if self.anchor.tzinfo is not None:
            object.__setattr__(self, "anchor", as_local(self.anchor))

    @classmethod
    def of_epoch(
        cls, epoch_second: int, offset_before: Offset, offset_after: Offset
    ) -> Transition:
        """Create a transition from the epoch second it occurs at."""
        return cls(
            local_from_epoch(epoch_second, offset_before), offset_before, offset_after
        )

    @property
    def instant(self) -> datetime.datetime:
        """Return the UTC instant of the transition."""
        return to_instant(self.anchor, self.offset_before)

    @property
    def epoch_second(self) -> int:
        """Return the transition instant as seconds since the epoch."""
        return local_epoch_seconds(self.anchor, self.offset_before)

    @property
    def date_time_before(self) -> datetime.datetime:
        """Return the local date-time of the transition using the offset before."""
        return self.anchor

    @property
    def date_time_after(self) -> datetime.datetime:
        """Return the local date-time of the transition using the offset after."""
        return self.anchor + self.duration

    @property
    def duration(self) -> datetime.timedelta:
        """Return the amount clocks change by, positive for a gap."""
        return datetime.timedelta(
            seconds=self.offset_after.total_seconds - self.offset_before.total_seconds
        )

    @property
    def is_gap(self) -> bool:
        """Return True if local times are skipped by this transition."""
        return self.offset_after.total_seconds > self.offset_before.total_seconds

    @property
    def is_overlap(self) -> bool:
        """Return True if local times occur twice because of this transition."""
        return self.offset_after.total_seconds < self.offset_before.total_seconds

    @property
    def valid_offsets(self) -> list[Offset]:
        """Return the offsets valid for local times within the transition."""
        if self.is_gap:
            return []
        return [self.offset_before, self.offset_after]

    def is_valid_offset(self, offset: Offset) -> bool:
        """Return True if the offset is valid for local times within the transition."""
        if self.is_gap:
            return False
        return offset in (self.offset_before, self.offset_after)

    def __str__(self) -> str:
        kind = "Gap" if self.is_gap else "Overlap"
        return (
            f"Transition[{kind} at {format_local(self.anchor)}{self.offset_before.id}"
            f" to {self.offset_after.id}]"
        )
