"""Tests for parsing and resolving zone ids."""

import datetime

import pytest

from tzrules import compat, zone_id
from tzrules.exceptions import UnknownZoneError, ZoneFormatError
from tzrules.offset import Offset
from tzrules.registry import RulesRegistry
from tzrules.rule_set import RuleSet
from tzrules.zone_id import FixedZone, RegionZone


class FailingProvider:
    """A provider that fails the test when consulted."""

    def recognizes(self, key: str) -> bool:
        raise AssertionError(f"Provider consulted for {key}")

    def load(self, key: str, version_hint: str | None) -> RuleSet:
        raise AssertionError(f"Provider consulted for {key}")

    def available_keys(self) -> set[str]:
        raise AssertionError("Provider consulted")


@pytest.fixture(name="failing_registry")
def mock_failing_registry() -> RulesRegistry:
    """Fixture for a registry that must not be consulted."""
    return RulesRegistry([FailingProvider()])


@pytest.mark.parametrize(
    "value,expected_id,expected_offset",
    [
        ("Z", "Z", "Z"),
        ("UTC", "UTC", "Z"),
        ("GMT", "GMT", "Z"),
        ("GMT0", "GMT0", "Z"),
        ("UCT", "UCT", "Z"),
        ("Greenwich", "Greenwich", "Z"),
        ("Universal", "Universal", "Z"),
        ("Zulu", "Zulu", "Z"),
        ("Etc/GMT+1", "Etc/GMT+1", "-01:00"),
        ("Etc/GMT-1", "Etc/GMT-1", "+01:00"),
        ("Etc/GMT-14", "Etc/GMT-14", "+14:00"),
        ("Etc/GMT+12", "Etc/GMT+12", "-12:00"),
        ("+01:00", "+01:00", "+01:00"),
        ("+01", "+01:00", "+01:00"),
        ("-0530", "-05:30", "-05:30"),
        ("+00:00", "Z", "Z"),
        ("UTC+01:00", "UTC+01:00", "+01:00"),
        ("UTC+1", "UTC+01:00", "+01:00"),
        ("GMT-05:30", "GMT-05:30", "-05:30"),
        ("UT+09", "UT+09:00", "+09:00"),
        ("UTC+00:00", "UTC", "Z"),
        ("GMT-0", "GMT", "Z"),
        ("UT", "UT", "Z"),
    ],
)
def test_fixed_zones(
    failing_registry: RulesRegistry,
    value: str,
    expected_id: str,
    expected_offset: str,
) -> None:
    """Test ids that resolve to a fixed offset without the registry."""
    zone = zone_id.of(value, failing_registry)
    assert isinstance(zone, FixedZone)
    assert zone.id == expected_id
    assert str(zone) == expected_id
    assert zone.offset == Offset.parse(expected_offset)
    assert zone.rules.is_fixed_offset()

    # Round trip of the id produces the same zone
    assert zone_id.of(zone.id, failing_registry) == zone


def test_etc_gmt_one(failing_registry: RulesRegistry) -> None:
    """Test the inverted sign of the Etc/GMT zones."""
    zone = zone_id.of("Etc/GMT+1", failing_registry)
    local = datetime.datetime(2022, 6, 1)
    assert zone.rules.get_offset_for_local(local) == Offset.of_hours(-1)


@pytest.mark.parametrize(
    "value,match",
    [
        ("", "invalid format"),
        ("a", "invalid format"),
        ("+", "invalid format"),
        ("+1:00", "invalid format"),
        ("+19:00", "out of range"),
        ("UTC+x", "Invalid ID for offset-based ZoneId"),
        ("UTC+25", "Invalid ID for offset-based ZoneId"),
        ("GMT+01:", "Invalid ID for offset-based ZoneId"),
        ("1Europe/London", "Invalid ID for region-based ZoneId"),
        ("Europe/Lon don", "Invalid ID for region-based ZoneId"),
        ("Europe/London!", "Invalid ID for region-based ZoneId"),
        ("/Europe", "Invalid ID for region-based ZoneId"),
    ],
)
def test_invalid_format(
    failing_registry: RulesRegistry, value: str, match: str
) -> None:
    """Test ids that fail before consulting the registry."""
    with pytest.raises(ZoneFormatError, match=match):
        zone_id.of(value, failing_registry)


def test_prefixed_format_error_detail(failing_registry: RulesRegistry) -> None:
    """Test the offset error is preserved for a prefixed id."""
    with pytest.raises(ZoneFormatError) as exc_info:
        zone_id.of("UTC+99", failing_registry)
    assert exc_info.value.detailed_error == "Invalid ID for ZoneOffset, out of range: +99"


def test_region(registry: RulesRegistry) -> None:
    """Test resolving a region from the time zone database."""
    zone = zone_id.of("Europe/London", registry)
    assert isinstance(zone, RegionZone)
    assert zone.id == "Europe/London"
    assert str(zone) == "Europe/London"
    assert not zone.rules.is_fixed_offset()
    assert zone_id.of(zone.id, registry) == zone
    assert hash(zone_id.of(zone.id, registry)) == hash(zone)
    assert repr(zone) == "RegionZone(id='Europe/London')"


def test_fixed_and_region_not_equal(registry: RulesRegistry) -> None:
    """Test the variant is part of the equality of a zone."""
    assert zone_id.of("Etc/UTC", registry) != zone_id.of("UTC", registry)


@pytest.mark.parametrize(
    "value",
    [
        "Europe/Lndon",
        "Mars/Olympus_Mons",
        "UTCX",
        "GMTfoo",
    ],
)
def test_unknown_region(registry: RulesRegistry, value: str) -> None:
    """Test a well formed region that is not in the database."""
    with pytest.raises(UnknownZoneError, match=f"Unknown time-zone ID: {value}"):
        zone_id.of(value, registry)


def test_unknown_region_is_not_format_error(registry: RulesRegistry) -> None:
    """Test the two failures are distinguishable."""
    with pytest.raises(UnknownZoneError) as exc_info:
        zone_id.of("Europe/Lndon", registry)
    assert not isinstance(exc_info.value, ZoneFormatError)
    assert isinstance(exc_info.value, LookupError)


def test_empty_registry() -> None:
    """Test regions are unknown without any providers."""
    registry = RulesRegistry()
    with pytest.raises(UnknownZoneError):
        zone_id.of("Europe/London", registry)
    assert zone_id.of("UTC+01:00", registry).id == "UTC+01:00"


def test_of_offset() -> None:
    """Test creating a fixed zone with a prefix."""
    offset = Offset.of_hours(2)
    assert zone_id.of_offset("", offset) == FixedZone("+02:00", offset)
    assert zone_id.of_offset("GMT", offset) == FixedZone("GMT+02:00", offset)
    assert zone_id.of_offset("UTC", offset).id == "UTC+02:00"
    assert zone_id.of_offset("UT", offset).id == "UT+02:00"
    assert zone_id.of_offset("UTC", Offset.UTC).id == "UTC"
    assert zone_id.of_offset("", Offset.UTC).id == "Z"


@pytest.mark.parametrize("prefix", ["EST", "utc", "UTC+", "Z"])
def test_of_offset_invalid_prefix(prefix: str) -> None:
    """Test an invalid prefix is a usage error rather than a format error."""
    with pytest.raises(ValueError, match="prefix should be GMT, UTC or UT") as exc_info:
        zone_id.of_offset(prefix, Offset.of_hours(1))
    assert not isinstance(exc_info.value, ZoneFormatError)


def test_normalized(registry: RulesRegistry) -> None:
    """Test normalizing zones to the offset they always have."""
    assert zone_id.normalized(zone_id.of("UTC", registry)) == FixedZone("Z", Offset.UTC)
    assert zone_id.normalized(zone_id.of("UTC+01:00", registry)).id == "+01:00"
    assert zone_id.normalized(zone_id.of("Etc/UTC", registry)) == FixedZone(
        "Z", Offset.UTC
    )
    paris = zone_id.of("Europe/Paris", registry)
    assert zone_id.normalized(paris) is paris


def test_aliases(registry: RulesRegistry) -> None:
    """Test resolving ids with an explicit alias map."""
    zone = zone_id.of("EST", registry, aliases=zone_id.SHORT_IDS)
    assert zone == FixedZone("-05:00", Offset.of_hours(-5))

    zone = zone_id.of("ECT", registry, aliases={"ECT": "Europe/Paris"})
    assert isinstance(zone, RegionZone)
    assert zone.id == "Europe/Paris"


def test_short_ids_compat(registry: RulesRegistry) -> None:
    """Test the legacy short ids are applied when enabled."""
    with compat.enable_short_ids():
        assert compat.is_short_ids_enabled()
        zone = zone_id.of("PST", registry)
        assert zone.id == "America/Los_Angeles"
        assert zone_id.of("HST", registry).id == "-10:00"
    assert not compat.is_short_ids_enabled()

    # Explicit aliases take the place of the short ids
    with compat.enable_short_ids():
        zone = zone_id.of("HST", registry, aliases={"HST": "UTC"})
        assert zone.id == "UTC"


def test_available_zone_ids(registry: RulesRegistry) -> None:
    """Test the set of region ids includes common zones."""
    ids = zone_id.available_zone_ids(registry)
    assert "Europe/London" in ids
    assert "America/Los_Angeles" in ids
    assert "UTC+01:00" not in ids
