"""Compile parsed TZif records into a RuleSet.

The TZif transitions describe the local time type in effect after each
transition. These are converted into changes of the wall offset and of the
standard offset, and the footer TZ string is converted into the recurring
transition rules used after the last transition.
"""

from __future__ import annotations

import datetime
import logging

from ..offset import Offset
from ..rule_set import RuleSet
from ..transition import Transition
from ..transition_rule import TimeDefinition, TransitionRule
from ..util import epoch_seconds
from .model import LocalTimeType, TimezoneInfo, TransitionRecord
from .tz_rule import Rule, RuleDate, RuleDay

__all__ = [
    "compile_rules",
]

_LOGGER = logging.getLogger(__name__)

# Transitions outside of the range of datetime are folded into the first offset
# or dropped. A day of margin allows for local times at any offset.
_MIN_EPOCH_SECOND = epoch_seconds(datetime.datetime(1, 1, 2, tzinfo=datetime.UTC))
_MAX_EPOCH_SECOND = epoch_seconds(datetime.datetime(9999, 12, 30, tzinfo=datetime.UTC))

# A year without a leap day for mapping julian days that never count Feb 29th
_NON_LEAP_YEAR = 2001


def _standard_utoffs(info: TimezoneInfo) -> list[int]:
    """Return the standard offset in effect after each transition.

    TZif files do not record the standard offset for daylight savings types,
    so it is taken from the nearest standard time type, preferring the one
    before the transition.
    """
    records: list[TransitionRecord] = info.transitions
    std_values = [
        None if record.local_time_type.dst else record.local_time_type.utoff
        for record in records
    ]
    previous: int | None = None
    if info.initial_type is not None and not info.initial_type.dst:
        previous = info.initial_type.utoff
    result: list[int | None] = []
    for value in std_values:
        if value is not None:
            previous = value
        result.append(previous)
    following = info.rule.std.offset.total_seconds if info.rule else None
    for i in reversed(range(len(records))):
        if std_values[i] is not None:
            following = std_values[i]
        elif result[i] is None:
            result[i] = following
    return [
        value if value is not None else record.local_time_type.utoff
        for value, record in zip(result, records)
    ]


def _initial_offsets(info: TimezoneInfo) -> tuple[Offset, Offset]:
    """Return the standard and wall offset before the first transition."""
    initial: LocalTimeType | None = info.initial_type
    if initial is None and info.transitions:
        initial = info.transitions[0].local_time_type
    if initial is not None:
        wall = Offset.of_total_seconds(initial.utoff)
        return (wall, wall)
    if info.rule is not None:
        return (info.rule.std.offset, info.rule.std.offset)
    return (Offset.UTC, Offset.UTC)


def _rule_date_fields(
    rule_date: RuleDate | RuleDay,
) -> tuple[int, int, int | None, datetime.timedelta]:
    """Return the month, day of month indicator, weekday and time for a TZ rule date."""
    if isinstance(rule_date, RuleDate):
        # TZ weekdays start at Sunday (0) and python weekdays start at Monday (0)
        day_of_week = (rule_date.day_of_week - 1) % 7
        if rule_date.week_of_month == 5:
            return (rule_date.month, -1, day_of_week, rule_date.time)
        day_of_month = 1 + (rule_date.week_of_month - 1) * 7
        return (rule_date.month, day_of_month, day_of_week, rule_date.time)
    if rule_date.leap_day_counted:
        # Days counted from January 1st, including Feb 29th in leap years
        days = datetime.timedelta(days=rule_date.day_of_year)
        return (1, 1, None, rule_date.time + days)
    date = datetime.date(_NON_LEAP_YEAR, 1, 1) + datetime.timedelta(
        days=rule_date.day_of_year - 1
    )
    return (date.month, date.day, None, rule_date.time)


def _is_permanent_dst(rule: Rule) -> bool:
    """Return True for rules that keep daylight savings in effect all year."""
    start, end = rule.dst_start, rule.dst_end
    return (
        isinstance(start, RuleDay)
        and isinstance(end, RuleDay)
        and start.time == datetime.timedelta(0)
        and (start.day_of_year, start.leap_day_counted) in ((0, True), (1, False))
        and end.day_of_year == 365
        and not end.leap_day_counted
        and end.time >= datetime.timedelta(hours=24)
    )


def transition_rules(rule: Rule) -> list[TransitionRule]:
    """Convert a TZ rule into the recurring rules for the start and end of daylight savings."""
    if (
        rule.dst is None
        or rule.dst_start is None
        or rule.dst_end is None
        or rule.dst.offset == rule.std.offset
    ):
        return []
    if _is_permanent_dst(rule):
        _LOGGER.debug("Ignoring TZ rule with daylight savings all year")
        return []
    std = rule.std.offset
    dst = rule.dst.offset
    result = []
    for rule_date, offset_before, offset_after in (
        (rule.dst_start, std, dst),
        (rule.dst_end, dst, std),
    ):
        month, day_of_month, day_of_week, time = _rule_date_fields(rule_date)
        result.append(
            TransitionRule(
                month=month,
                day_of_month_indicator=day_of_month,
                day_of_week=day_of_week,
                time=time,
                time_definition=TimeDefinition.WALL,
                standard_offset=std,
                offset_before=offset_before,
                offset_after=offset_after,
            )
        )
    return result


def compile_rules(info: TimezoneInfo) -> RuleSet:
    """Compile the TZif records into a RuleSet."""
    (standard, wall) = _initial_offsets(info)
    standard_transitions: list[Transition] = []
    transitions: list[Transition] = []
    for record, std_utoff in zip(info.transitions, _standard_utoffs(info)):
        wall_after = Offset.of_total_seconds(record.local_time_type.utoff)
        standard_after = Offset.of_total_seconds(std_utoff)
        epoch_second = record.transition_time
        if epoch_second < _MIN_EPOCH_SECOND:
            # Earlier than can be represented, so this becomes the initial offset
            (standard, wall) = (standard_after, wall_after)
            continue
        if epoch_second > _MAX_EPOCH_SECOND:
            _LOGGER.debug("Skipping transitions after %s", epoch_second)
            break
        if wall_after != wall:
            transitions.append(Transition.of_epoch(epoch_second, wall, wall_after))
            wall = wall_after
        if standard_after != standard:
            standard_transitions.append(
                Transition.of_epoch(epoch_second, standard, standard_after)
            )
            standard = standard_after

    base_standard = (
        standard_transitions[0].offset_before if standard_transitions else standard
    )
    base_wall = transitions[0].offset_before if transitions else wall
    rules = transition_rules(info.rule) if info.rule else []
    _LOGGER.debug(
        "Compiled %d transitions and %d rules", len(transitions), len(rules)
    )
    return RuleSet(base_standard, base_wall, standard_transitions, transitions, rules)
