"""Library for parsing and resolving zone ids.

A zone id is either a fixed offset, such as "+01:00" or "UTC+01:00", or a
geographic region, such as "Europe/London", whose offset varies according
to the rules supplied by a RulesRegistry. Fixed offset ids never consult
the registry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypeAlias

from .compat import zone_compat
from .exceptions import ZoneFormatError
from .offset import Offset
from .registry import RulesRegistry
from .rule_set import RuleSet
from .util import EPOCH

__all__ = [
    "FixedZone",
    "RegionZone",
    "ZoneIdentity",
    "SHORT_IDS",
    "of",
    "of_offset",
    "normalized",
    "available_zone_ids",
]

_LOGGER = logging.getLogger(__name__)

# Longest prefix first so that UTC is matched before UT
_PREFIXES = ("UTC", "GMT", "UT")
_OFFSET_PREFIXES = frozenset({"", *_PREFIXES})

_REGION_ID_REGEX = re.compile(r"[A-Za-z][A-Za-z0-9~/._+-]+", re.ASCII)

# Etc/GMT+N is west of Greenwich, so the sign is inverted
_ETC_GMT_REGEX = re.compile(r"Etc/GMT(?P<sign>[+-])(?P<hours>[1-9]|1[0-8])", re.ASCII)

_ZERO_OFFSET_IDS = frozenset(
    {"Z", "UTC", "GMT", "GMT0", "UCT", "Greenwich", "Universal", "Zulu"}
)

SHORT_IDS: Mapping[str, str] = {
    "ACT": "Australia/Darwin",
    "AET": "Australia/Sydney",
    "AGT": "America/Argentina/Buenos_Aires",
    "ART": "Africa/Cairo",
    "AST": "America/Anchorage",
    "BET": "America/Sao_Paulo",
    "BST": "Asia/Dhaka",
    "CAT": "Africa/Harare",
    "CNT": "America/St_Johns",
    "CST": "America/Chicago",
    "CTT": "Asia/Shanghai",
    "EAT": "Africa/Addis_Ababa",
    "ECT": "Europe/Paris",
    "IET": "America/Indiana/Indianapolis",
    "IST": "Asia/Kolkata",
    "JST": "Asia/Tokyo",
    "MIT": "Pacific/Apia",
    "NET": "Asia/Yerevan",
    "NST": "Pacific/Auckland",
    "PLT": "Asia/Karachi",
    "PNT": "America/Phoenix",
    "PRT": "America/Puerto_Rico",
    "PST": "America/Los_Angeles",
    "SST": "Pacific/Guadalcanal",
    "VST": "Asia/Ho_Chi_Minh",
    "EST": "-05:00",
    "MST": "-07:00",
    "HST": "-10:00",
}
"""Legacy three letter ids mapped to their modern equivalent."""


@dataclass(frozen=True)
class FixedZone:
    """A zone with a fixed offset that never changes."""

    id: str
    """The zone id, e.g. +01:00, UTC+01:00 or Etc/GMT-1."""

    offset: Offset
    """The offset of the zone."""

    @classmethod
    def of(cls, offset: Offset) -> FixedZone:
        """Return a zone identified by the offset id itself."""
        return cls(offset.id, offset)

    @property
    def rules(self) -> RuleSet:
        """Return the constant offset rules for the zone."""
        return RuleSet.of_offset(self.offset)

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class RegionZone:
    """A geographic zone whose offset is determined by its rules."""

    id: str
    """The region key, e.g. Europe/London."""

    rules: RuleSet = field(compare=False, repr=False)
    """The rules loaded from the registry when the zone was resolved."""

    def __str__(self) -> str:
        return self.id


ZoneIdentity: TypeAlias = FixedZone | RegionZone


def of(
    zone_id: str,
    registry: RulesRegistry,
    aliases: Mapping[str, str] | None = None,
) -> ZoneIdentity:
    """Parse and resolve a zone id.

    The aliases are applied before parsing. When not specified, the legacy
    SHORT_IDS are applied if enabled with `compat.enable_short_ids`.

    Raises ZoneFormatError when the text is not a valid zone id and
    UnknownZoneError when a region id is not known to the registry.
    """
    if aliases is None and zone_compat.is_short_ids_enabled():
        aliases = SHORT_IDS
    if aliases and (target := aliases.get(zone_id)) is not None:
        _LOGGER.debug("Using alias %s for zone id %s", target, zone_id)
        zone_id = target

    if (literal := _of_literal(zone_id)) is not None:
        return literal
    if len(zone_id) <= 1 or zone_id.startswith(("+", "-")):
        return FixedZone.of(Offset.parse(zone_id))
    for prefix in _PREFIXES:
        if zone_id.startswith(prefix):
            return _of_with_prefix(zone_id, prefix, registry)
    return _of_region(zone_id, registry)


def of_offset(prefix: str, offset: Offset) -> FixedZone:
    """Return a fixed zone for the offset with an optional prefix.

    The prefix must be one of "", "GMT", "UTC" or "UT". The id of the zone
    is the prefix followed by the offset id, or just the prefix when the
    offset is zero.
    """
    if prefix not in _OFFSET_PREFIXES:
        raise ValueError(f"prefix should be GMT, UTC or UT, is: {prefix}")
    if not prefix:
        return FixedZone.of(offset)
    if offset.total_seconds == 0:
        return FixedZone(prefix, offset)
    return FixedZone(prefix + offset.id, offset)


def normalized(zone: ZoneIdentity) -> ZoneIdentity:
    """Return the offset based zone for a zone whose rules are fixed."""
    match zone:
        case FixedZone(offset=offset):
            return FixedZone.of(offset)
        case RegionZone(rules=rules):
            if rules.is_fixed_offset():
                return FixedZone.of(rules.get_offset(EPOCH))
            return zone


def available_zone_ids(registry: RulesRegistry) -> set[str]:
    """Return the region ids known to the registry."""
    return registry.available_ids()


def _of_literal(zone_id: str) -> FixedZone | None:
    """Return a fixed zone for ids that are known aliases of a fixed offset."""
    if zone_id in _ZERO_OFFSET_IDS:
        return FixedZone(zone_id, Offset.UTC)
    if match := _ETC_GMT_REGEX.fullmatch(zone_id):
        hours = int(match.group("hours"))
        if match.group("sign") == "+":
            hours = -hours
        return FixedZone(zone_id, Offset.of_hours(hours))
    return None


def _of_with_prefix(zone_id: str, prefix: str, registry: RulesRegistry) -> ZoneIdentity:
    """Parse a zone id that starts with a GMT, UTC or UT prefix."""
    suffix = zone_id[len(prefix) :]
    if not suffix:
        return of_offset(prefix, Offset.UTC)
    if suffix[0] not in "+-":
        return _of_region(zone_id, registry)
    try:
        offset = Offset.parse(suffix)
    except ZoneFormatError as err:
        raise ZoneFormatError(
            f"Invalid ID for offset-based ZoneId: {zone_id}",
            detailed_error=err.message,
        ) from err
    return of_offset(prefix, offset)


def _of_region(zone_id: str, registry: RulesRegistry) -> RegionZone:
    """Resolve a region id against the registry."""
    if not _REGION_ID_REGEX.fullmatch(zone_id):
        raise ZoneFormatError(
            f"Invalid ID for region-based ZoneId, invalid format: {zone_id}"
        )
    return RegionZone(zone_id, registry.get_rules(zone_id))
