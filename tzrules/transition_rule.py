"""Rules for generating recurring transitions.

A zone that currently observes daylight savings changes its offset at the
same point every year, e.g. the last Sunday in March. Rather than storing
these transitions forever, a rule describes how to create the transition
for any year on demand.
"""

from __future__ import annotations

import calendar
import datetime
import enum
from dataclasses import dataclass

from dateutil import relativedelta

from .offset import Offset
from .transition import Transition

__all__ = [
    "TimeDefinition",
    "TransitionRule",
]

_MIDNIGHT = datetime.time()


class TimeDefinition(str, enum.Enum):
    """Describes how the local time of a transition rule is interpreted."""

    UTC = "UTC"
    """The local time is expressed in UTC."""

    WALL = "WALL"
    """The local time is expressed in the wall offset in effect before the transition."""

    STANDARD = "STANDARD"
    """The local time is expressed in the standard offset."""

    def create_date_time(
        self,
        value: datetime.datetime,
        standard_offset: Offset,
        wall_offset: Offset,
    ) -> datetime.datetime:
        """Convert a date-time in this definition to a wall clock date-time."""
        if self is TimeDefinition.UTC:
            return value + wall_offset.as_timedelta()
        if self is TimeDefinition.STANDARD:
            return value + datetime.timedelta(
                seconds=wall_offset.total_seconds - standard_offset.total_seconds
            )
        return value


def _format_time(value: datetime.timedelta) -> str:
    """Format the time of day, which may exceed 24 hours or be negative."""
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    hours, remainder = divmod(abs(total), 3600)
    minutes, seconds = divmod(remainder, 60)
    result = f"{sign}{hours:02}:{minutes:02}"
    if seconds:
        result += f":{seconds:02}"
    return result


@dataclass(frozen=True)
class TransitionRule:
    """A rule expressing how to create a transition for any year."""

    month: int
    """The month of the transition, from 1 to 12."""

    day_of_month_indicator: int
    """The day of month of the transition.

    A positive value is the day of month, and when day_of_week is set the
    transition is on that weekday on or after the day. A negative value
    counts back from the end of the month, -1 being the last day, and when
    day_of_week is set the transition is on that weekday on or before it.
    """

    day_of_week: int | None
    """The weekday (0 Monday to 6 Sunday) of the transition or None for a fixed date."""

    time: datetime.timedelta
    """Time of day from midnight, which may be negative or beyond 24 hours."""

    time_definition: TimeDefinition
    """How the time of day should be interpreted."""

    standard_offset: Offset
    """The standard offset in effect at the transition."""

    offset_before: Offset
    """The offset before the transition."""

    offset_after: Offset
    """The offset after the transition."""

    def __post_init__(self) -> None:
        """Validate the rule fields."""
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12: {self.month}")
        if (
            self.day_of_month_indicator < -28
            or self.day_of_month_indicator > 31
            or self.day_of_month_indicator == 0
        ):
            raise ValueError(
                "Day of month indicator must be between -28 and 31 inclusive excluding zero"
            )
        if self.day_of_week is not None and not 0 <= self.day_of_week <= 6:
            raise ValueError(f"Day of week must be between 0 and 6: {self.day_of_week}")
        if self.offset_before == self.offset_after:
            raise ValueError("Offsets must not be equal")

    def transition_for_year(self, year: int) -> Transition:
        """Create the transition this rule describes for the specified year."""
        weekday = None
        if self.day_of_week is not None:
            direction = -1 if self.day_of_month_indicator < 0 else +1
            weekday = relativedelta.weekdays[self.day_of_week](direction)
        if self.day_of_month_indicator < 0:
            delta = relativedelta.relativedelta(
                day=31, days=self.day_of_month_indicator + 1, weekday=weekday
            )
        else:
            delta = relativedelta.relativedelta(
                day=self.day_of_month_indicator, weekday=weekday
            )
        date = datetime.date(year, self.month, 1) + delta
        local = datetime.datetime.combine(date, _MIDNIGHT) + self.time
        wall = self.time_definition.create_date_time(
            local, self.standard_offset, self.offset_before
        )
        return Transition(wall, self.offset_before, self.offset_after)

    def __str__(self) -> str:
        is_gap = self.offset_after.total_seconds > self.offset_before.total_seconds
        kind = "Gap" if is_gap else "Overlap"
        month = calendar.month_name[self.month].upper()
        parts = [f"TransitionRule[{kind} {self.offset_before} to {self.offset_after}, "]
        if self.day_of_week is not None:
            day = calendar.day_name[self.day_of_week].upper()
            if self.day_of_month_indicator == -1:
                parts.append(f"{day} on or before last day of {month}")
            elif self.day_of_month_indicator < 0:
                parts.append(
                    f"{day} on or before last day minus "
                    f"{-self.day_of_month_indicator - 1} of {month}"
                )
            else:
                parts.append(f"{day} on or after {month} {self.day_of_month_indicator}")
        else:
            parts.append(f"{month} {self.day_of_month_indicator}")
        parts.append(
            f" at {_format_time(self.time)} {self.time_definition.value}"
            f", standard offset {self.standard_offset}]"
        )
        return "".join(parts)
