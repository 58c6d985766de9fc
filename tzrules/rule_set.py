"""The rules describing how the offset for a zone changes over time.

A RuleSet holds the complete offset history of a single zone and answers
two kinds of questions: what offset applies at an instant, and what
offset(s) are valid for a local date-time. The first is always a single
answer. The second may have zero answers when the local time is in a gap,
or two answers when the local time is in an overlap.

The history is stored as parallel sorted lists that are searched with a
binary search. Once the history is exhausted, recurring transition rules
are used to create the transitions for the year of the query on demand so
that the stored history stays finite.
"""

from __future__ import annotations

import bisect
import datetime
import logging
from collections.abc import Sequence

from .offset import Offset
from .transition import Transition
from .transition_rule import TransitionRule
from .util import as_local, epoch_seconds

__all__ = [
    "RuleSet",
]

_LOGGER = logging.getLogger(__name__)

# Rule transitions are memoized for years before this
LAST_CACHED_YEAR = 2100

MAX_RULES = 16

_SECONDS_PER_DAY = 86400
_EPOCH_ORDINAL = datetime.date(1970, 1, 1).toordinal()
_MAX_ORDINAL = datetime.date.max.toordinal()


def _find_year(epoch_second: int, offset: Offset) -> int:
    """Return the local year of the epoch second at the offset."""
    local_day = (epoch_second + offset.total_seconds) // _SECONDS_PER_DAY
    ordinal = min(max(local_day + _EPOCH_ORDINAL, 1), _MAX_ORDINAL)
    return datetime.date.fromordinal(ordinal).year


class RuleSet:
    """The offset history and future rules for a zone."""

    def __init__(
        self,
        base_standard_offset: Offset,
        base_wall_offset: Offset,
        standard_transitions: Sequence[Transition],
        transitions: Sequence[Transition],
        rules: Sequence[TransitionRule] = (),
    ) -> None:
        """Initialize RuleSet.

        The standard transitions describe changes to the standard offset of
        the zone and the transitions describe changes to the actual (wall)
        offset, each in ascending order. The rules are used to create
        transitions after the last transition.
        """
        if len(rules) > MAX_RULES:
            raise ValueError("Too many transition rules")

        self._standard_transitions: list[int] = []
        self._standard_offsets: list[Offset] = [base_standard_offset]
        for trans in standard_transitions:
            self._standard_transitions.append(trans.epoch_second)
            self._standard_offsets.append(trans.offset_after)

        # Each transition contributes the local start and end of the gap or overlap
        self._savings_local_transitions: list[datetime.datetime] = []
        self._wall_offsets: list[Offset] = [base_wall_offset]
        self._savings_instant_transitions: list[int] = []
        for trans in transitions:
            if trans.is_gap:
                self._savings_local_transitions.append(trans.date_time_before)
                self._savings_local_transitions.append(trans.date_time_after)
            else:
                self._savings_local_transitions.append(trans.date_time_after)
                self._savings_local_transitions.append(trans.date_time_before)
            self._wall_offsets.append(trans.offset_after)
            self._savings_instant_transitions.append(trans.epoch_second)

        for values in (self._standard_transitions, self._savings_instant_transitions):
            if any(a >= b for a, b in zip(values, values[1:])):
                raise ValueError("Transitions must be in ascending order")

        self._rules: tuple[TransitionRule, ...] = tuple(rules)
        # Rule transitions in this year must follow on from the explicit history
        self._last_historic_year = (
            _find_year(self._savings_instant_transitions[-1], self._wall_offsets[-1])
            if self._savings_instant_transitions
            else datetime.MINYEAR
        )
        self._rules_cache: dict[int, tuple[Transition, ...]] = {}

    @classmethod
    def of_offset(cls, offset: Offset) -> RuleSet:
        """Return rules for a zone that always has the same offset."""
        return cls(offset, offset, [], [], [])

    @property
    def transitions(self) -> list[Transition]:
        """Return the explicit transition history, not including rule transitions."""
        return [
            Transition.of_epoch(
                epoch_second, self._wall_offsets[i], self._wall_offsets[i + 1]
            )
            for i, epoch_second in enumerate(self._savings_instant_transitions)
        ]

    @property
    def transition_rules(self) -> tuple[TransitionRule, ...]:
        """Return the rules used for transitions after the explicit history."""
        return self._rules

    def is_fixed_offset(self) -> bool:
        """Return True if the offset never changes."""
        return not self._savings_instant_transitions and not self._rules

    def get_offset(self, instant: datetime.datetime) -> Offset:
        """Return the offset in effect at the instant."""
        if self.is_fixed_offset():
            return self._wall_offsets[0]
        epoch_second = epoch_seconds(instant)
        if self._use_rules(epoch_second):
            offset = self._wall_offsets[-1]
            year = _find_year(epoch_second, offset)
            for trans in self._find_transitions(year):
                if epoch_second < trans.epoch_second:
                    return trans.offset_before
                offset = trans.offset_after
            return offset
        index = bisect.bisect_right(self._savings_instant_transitions, epoch_second)
        return self._wall_offsets[index]

    def get_offset_info(self, local: datetime.datetime) -> Offset | Transition:
        """Return the single valid offset or the transition enclosing the local date-time."""
        local = as_local(local)
        if self.is_fixed_offset():
            return self._wall_offsets[0]
        locals_ = self._savings_local_transitions
        if self._rules and (not locals_ or local > locals_[-1]):
            info: Offset | Transition = self._wall_offsets[-1]
            for trans in self._find_transitions(local.year):
                info = self._find_offset_info(local, trans)
                if isinstance(info, Transition) or info == trans.offset_before:
                    return info
            return info

        index = bisect.bisect_right(locals_, local) - 1
        if index == -1:
            # before the first transition
            return self._wall_offsets[0]
        if index % 2 == 1:
            # between transitions
            return self._wall_offsets[index // 2 + 1]
        offset_before = self._wall_offsets[index // 2]
        offset_after = self._wall_offsets[index // 2 + 1]
        if offset_after.total_seconds > offset_before.total_seconds:
            return Transition(locals_[index], offset_before, offset_after)
        return Transition(locals_[index + 1], offset_before, offset_after)

    def get_offset_for_local(self, local: datetime.datetime) -> Offset:
        """Return a best effort offset for the local date-time.

        Within a gap the offset before the transition is returned and within
        an overlap the offset after the transition is returned.
        """
        info = self.get_offset_info(local)
        if isinstance(info, Transition):
            if info.is_gap:
                return info.offset_before
            return info.offset_after
        return info

    def get_valid_offsets(self, local: datetime.datetime) -> list[Offset]:
        """Return the offsets valid for the local date-time.

        The result is empty for a gap, has two offsets for an overlap and
        one offset otherwise.
        """
        info = self.get_offset_info(local)
        if isinstance(info, Transition):
            return info.valid_offsets
        return [info]

    def get_transition(self, local: datetime.datetime) -> Transition | None:
        """Return the transition enclosing the local date-time, if any."""
        info = self.get_offset_info(local)
        if isinstance(info, Transition):
            return info
        return None

    def is_valid_offset(self, local: datetime.datetime, offset: Offset) -> bool:
        """Return True if the offset is valid for the local date-time."""
        return offset in self.get_valid_offsets(local)

    def get_standard_offset(self, instant: datetime.datetime) -> Offset:
        """Return the standard (non daylight savings) offset at the instant."""
        if self.is_fixed_offset():
            return self._standard_offsets[0]
        index = bisect.bisect_right(self._standard_transitions, epoch_seconds(instant))
        return self._standard_offsets[index]

    def get_daylight_savings(self, instant: datetime.datetime) -> datetime.timedelta:
        """Return the amount of daylight savings in effect at the instant."""
        if self.is_fixed_offset():
            return datetime.timedelta(0)
        standard = self.get_standard_offset(instant)
        actual = self.get_offset(instant)
        return datetime.timedelta(seconds=actual.total_seconds - standard.total_seconds)

    def is_daylight_savings(self, instant: datetime.datetime) -> bool:
        """Return True if the offset at the instant differs from the standard offset."""
        return self.get_standard_offset(instant) != self.get_offset(instant)

    def next_transition(self, instant: datetime.datetime) -> Transition | None:
        """Return the first transition strictly after the instant, if any."""
        if self.is_fixed_offset():
            return None
        epoch_second = epoch_seconds(instant)
        instants = self._savings_instant_transitions
        if not instants or epoch_second >= instants[-1]:
            if not self._rules:
                return None
            year = _find_year(epoch_second, self._wall_offsets[-1])
            for trans in self._find_transitions(year):
                if epoch_second < trans.epoch_second:
                    return trans
            if year < datetime.MAXYEAR and (
                following := self._find_transitions(year + 1)
            ):
                return following[0]
            return None
        index = bisect.bisect_right(instants, epoch_second)
        return Transition.of_epoch(
            instants[index], self._wall_offsets[index], self._wall_offsets[index + 1]
        )

    def previous_transition(self, instant: datetime.datetime) -> Transition | None:
        """Return the last transition strictly before the instant, if any."""
        if self.is_fixed_offset():
            return None
        epoch_second = epoch_seconds(instant)
        if instant.microsecond:
            # a transition in the same second is before the instant
            epoch_second += 1
        instants = self._savings_instant_transitions
        if self._rules and (not instants or epoch_second > instants[-1]):
            year = _find_year(epoch_second, self._wall_offsets[-1])
            for trans in reversed(self._find_transitions(year)):
                if epoch_second > trans.epoch_second:
                    return trans
            if year > self._last_historic_year and (
                previous := self._find_transitions(year - 1)
            ):
                return previous[-1]
        index = bisect.bisect_left(instants, epoch_second)
        if index <= 0:
            return None
        return Transition.of_epoch(
            instants[index - 1], self._wall_offsets[index - 1], self._wall_offsets[index]
        )

    def _use_rules(self, epoch_second: int) -> bool:
        """Return True if the epoch second is after the explicit history."""
        instants = self._savings_instant_transitions
        return bool(self._rules) and (not instants or epoch_second > instants[-1])

    def _find_transitions(self, year: int) -> tuple[Transition, ...]:
        """Return the rule transitions for the year in ascending order."""
        if (cached := self._rules_cache.get(year)) is not None:
            return cached
        _LOGGER.debug("Creating rule transitions for year %s", year)
        result = tuple(
            sorted(
                (rule.transition_for_year(year) for rule in self._rules),
                key=lambda trans: trans.epoch_second,
            )
        )
        if year <= self._last_historic_year:
            result = self._after_history(result)
        if year < LAST_CACHED_YEAR:
            self._rules_cache[year] = result
        return result

    def _after_history(
        self, transitions: tuple[Transition, ...]
    ) -> tuple[Transition, ...]:
        """Return the rule transitions that continue on from the explicit history.

        The rules may already be in force before the last explicit transition,
        so in that year only transitions after it that change the running
        offset are kept.
        """
        last_instant = self._savings_instant_transitions[-1]
        offset = self._wall_offsets[-1]
        result = []
        for trans in transitions:
            if trans.epoch_second <= last_instant or trans.offset_before != offset:
                continue
            result.append(trans)
            offset = trans.offset_after
        return tuple(result)

    @staticmethod
    def _find_offset_info(
        local: datetime.datetime, trans: Transition
    ) -> Offset | Transition:
        """Return the offset or transition for a local date-time near a transition."""
        if trans.is_gap:
            if local < trans.date_time_before:
                return trans.offset_before
            if local < trans.date_time_after:
                return trans
            return trans.offset_after
        if local >= trans.date_time_before:
            return trans.offset_after
        if local < trans.date_time_after:
            return trans.offset_before
        return trans

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, RuleSet):
            return NotImplemented
        return (
            self._standard_transitions == other._standard_transitions
            and self._standard_offsets == other._standard_offsets
            and self._savings_instant_transitions == other._savings_instant_transitions
            and self._wall_offsets == other._wall_offsets
            and self._rules == other._rules
        )

    def __hash__(self) -> int:
        return hash(
            (
                tuple(self._standard_transitions),
                tuple(self._savings_instant_transitions),
                self._rules,
            )
        )

    def __repr__(self) -> str:
        return f"RuleSet[currentStandardOffset={self._standard_offsets[-1]}]"
