"""An implementation of datetime.tzinfo backed by the rules of a zone.

This allows a zone to be attached to python datetime values. Ambiguous and
skipped local times are resolved with the PEP 495 fold attribute: a fold of
0 uses the offset before the transition and a fold of 1 uses the offset
after the transition, the same as zoneinfo.
"""

from __future__ import annotations

import datetime

from .offset import Offset
from .rule_set import RuleSet
from .util import as_local, to_instant
from .zone_id import ZoneIdentity

__all__ = [
    "ZoneTzInfo",
]


class ZoneTzInfo(datetime.tzinfo):
    """A tzinfo for a zone returned by `zone_id.of`."""

    def __init__(self, zone: ZoneIdentity) -> None:
        """Initialize ZoneTzInfo."""
        self._zone = zone
        self._rules: RuleSet = zone.rules

    @property
    def zone(self) -> ZoneIdentity:
        """Return the zone for this tzinfo."""
        return self._zone

    def _find_offset(self, dt: datetime.datetime) -> Offset:
        """Return the offset for the wall time of the datetime."""
        info = self._rules.get_offset_info(as_local(dt))
        if isinstance(info, Offset):
            return info
        if dt.fold:
            return info.offset_after
        return info.offset_before

    def utcoffset(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return offset of local time from UTC, as a timedelta object."""
        if dt is None:
            return None
        return self._find_offset(dt).as_timedelta()

    def dst(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return the daylight saving time (DST) adjustment."""
        if dt is None:
            return None
        instant = to_instant(dt, self._find_offset(dt))
        return self._rules.get_daylight_savings(instant)

    def tzname(self, dt: datetime.datetime | None) -> str | None:
        """Return the zone id as the name of the timezone."""
        return self._zone.id

    def fromutc(self, dt: datetime.datetime) -> datetime.datetime:
        """Convert a UTC datetime with this tzinfo attached to local time."""
        if dt.tzinfo is not self:
            raise ValueError("fromutc: dt.tzinfo is not self")
        offset = self._rules.get_offset(dt.replace(tzinfo=datetime.UTC))
        local = dt + offset.as_timedelta()
        trans = self._rules.get_transition(as_local(local))
        if trans is not None and trans.is_overlap and offset == trans.offset_after:
            return local.replace(fold=1)
        return local

    def __str__(self) -> str:
        return self._zone.id

    def __repr__(self) -> str:
        return f"ZoneTzInfo({self._zone.id})"
