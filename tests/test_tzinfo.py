"""Tests for the tzinfo implementation."""

import datetime
import io
import zoneinfo
from collections.abc import Callable

import pytest

from tzrules import zone_id
from tzrules.registry import RulesRegistry
from tzrules.tzif.compiler import compile_rules
from tzrules.tzif.tzif import read_tzif
from tzrules.tzinfo import ZoneTzInfo
from tzrules.zone_id import RegionZone


@pytest.fixture(name="london")
def mock_london(registry: RulesRegistry) -> ZoneTzInfo:
    """Fixture for a tzinfo for Europe/London."""
    return ZoneTzInfo(zone_id.of("Europe/London", registry))


def test_utcoffset(london: ZoneTzInfo) -> None:
    """Test the offset of wall times."""
    value = datetime.datetime(2008, 7, 1, 12, 0, tzinfo=london)
    assert value.utcoffset() == datetime.timedelta(hours=1)
    assert value.dst() == datetime.timedelta(hours=1)
    assert value.tzname() == "Europe/London"

    value = datetime.datetime(2008, 1, 1, 12, 0, tzinfo=london)
    assert value.utcoffset() == datetime.timedelta(0)
    assert value.dst() == datetime.timedelta(0)

    assert london.utcoffset(None) is None
    assert london.dst(None) is None
    assert str(london) == "Europe/London"
    assert repr(london) == "ZoneTzInfo(Europe/London)"


def test_overlap_fold(london: ZoneTzInfo) -> None:
    """Test the fold selects between the offsets of an overlap."""
    value = datetime.datetime(2008, 10, 26, 1, 30, tzinfo=london)
    assert value.utcoffset() == datetime.timedelta(hours=1)
    assert value.replace(fold=1).utcoffset() == datetime.timedelta(0)


def test_gap_fold(london: ZoneTzInfo) -> None:
    """Test the fold selects the offset used for a skipped wall time."""
    value = datetime.datetime(2008, 3, 30, 1, 30, tzinfo=london)
    assert value.utcoffset() == datetime.timedelta(0)
    assert value.replace(fold=1).utcoffset() == datetime.timedelta(hours=1)


def test_fromutc(london: ZoneTzInfo) -> None:
    """Test converting instants to local time sets the fold in an overlap."""
    first = datetime.datetime(2008, 10, 26, 0, 30, tzinfo=datetime.UTC)
    second = datetime.datetime(2008, 10, 26, 1, 30, tzinfo=datetime.UTC)

    value = first.astimezone(london)
    assert value.replace(tzinfo=None) == datetime.datetime(2008, 10, 26, 1, 30)
    assert value.fold == 0
    assert value.utcoffset() == datetime.timedelta(hours=1)

    value = second.astimezone(london)
    assert value.replace(tzinfo=None) == datetime.datetime(2008, 10, 26, 1, 30)
    assert value.fold == 1
    assert value.utcoffset() == datetime.timedelta(0)

    assert first.astimezone(london).astimezone(datetime.UTC) == first
    assert second.astimezone(london).astimezone(datetime.UTC) == second


def test_fromutc_requires_self(london: ZoneTzInfo) -> None:
    """Test fromutc is only called with the tzinfo attached."""
    with pytest.raises(ValueError, match="dt.tzinfo is not self"):
        london.fromutc(datetime.datetime(2008, 1, 1, tzinfo=datetime.UTC))


def test_fixed_zone(registry: RulesRegistry) -> None:
    """Test a tzinfo for a fixed offset zone."""
    tz_info = ZoneTzInfo(zone_id.of("UTC+05:30", registry))
    value = datetime.datetime(2022, 1, 1, 12, 0, tzinfo=tz_info)
    assert value.utcoffset() == datetime.timedelta(hours=5, minutes=30)
    assert value.dst() == datetime.timedelta(0)
    assert value.tzname() == "UTC+05:30"
    assert tz_info.zone.id == "UTC+05:30"
    assert datetime.datetime(2022, 1, 1, tzinfo=datetime.UTC).astimezone(
        tz_info
    ).hour == 5


@pytest.mark.parametrize(
    "key",
    [
        "Europe/London",
        "Europe/Dublin",
        "America/Los_Angeles",
        "America/St_Johns",
        "Australia/Sydney",
        "Australia/Lord_Howe",
        "Pacific/Chatham",
        "America/Santiago",
        "America/Nuuk",
    ],
)
def test_matches_zoneinfo(
    key: str, tzdata_content: Callable[[str], bytes]
) -> None:
    """Test wall times around each transition agree with zoneinfo."""
    content = tzdata_content(key)
    rules = compile_rules(read_tzif(content))
    tz_info = ZoneTzInfo(RegionZone(key, rules))
    expected_tz = zoneinfo.ZoneInfo.from_file(io.BytesIO(content), key=key)

    value = datetime.datetime(2000, 1, 1, tzinfo=datetime.UTC)
    while (trans := rules.next_transition(value)) is not None and (
        trans.instant.year < 2040
    ):
        for local in (
            trans.date_time_before - datetime.timedelta(minutes=31),
            min(trans.date_time_before, trans.date_time_after)
            + datetime.timedelta(minutes=15),
            max(trans.date_time_before, trans.date_time_after)
            + datetime.timedelta(minutes=31),
        ):
            for fold in (0, 1):
                actual = local.replace(tzinfo=tz_info, fold=fold)
                expected = local.replace(tzinfo=expected_tz, fold=fold)
                assert actual.utcoffset() == expected.utcoffset(), (local, fold)
        value = trans.instant
