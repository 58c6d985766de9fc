"""Tests that all zones in the time zone database compile to the same offsets as zoneinfo."""

import datetime
import io
import zoneinfo
from collections.abc import Callable
from importlib import resources

import pytest

from tzrules.tzif.compiler import compile_rules
from tzrules.tzif.timezoneinfo import TzdataRulesProvider
from tzrules.tzif.tzif import read_tzif

TZDATA_KEYS = sorted(
    key
    for key in resources.files("tzdata").joinpath("zones").read_text().split()
    if not key.startswith("System") and key != "localtime"
)

START = datetime.datetime(1970, 1, 1, 3, 0, tzinfo=datetime.UTC)
END = datetime.datetime(2040, 1, 1, tzinfo=datetime.UTC)
STEP = datetime.timedelta(days=11, hours=7)


@pytest.mark.parametrize("key", TZDATA_KEYS)
def test_all_tzdata(key: str, tzdata_content: Callable[[str], bytes]) -> None:
    """Verify every timezone compiles and agrees with zoneinfo."""
    content = tzdata_content(key)
    rules = compile_rules(read_tzif(content))
    expected_tz = zoneinfo.ZoneInfo.from_file(io.BytesIO(content), key=key)

    value = START
    while value < END:
        expected = value.astimezone(expected_tz).utcoffset()
        assert rules.get_offset(value).as_timedelta() == expected, value
        value += STEP


def test_all_zoneinfo(tzdata_provider: TzdataRulesProvider) -> None:
    """Verify the provider knows every timezone known to zoneinfo."""
    keys = {
        key
        for key in zoneinfo.available_timezones()
        if not key.startswith("System") and key != "localtime"
    }
    assert keys <= tzdata_provider.available_keys()
