"""Test fixtures."""

from collections.abc import Callable
from importlib import resources

import pytest

from tzrules.document import DocumentRulesProvider
from tzrules.registry import RulesRegistry
from tzrules.tzif import TzdataRulesProvider

# A zone observing daylight savings from 2008 with the same rules as London
TEST_DOCUMENT = {
    "versions": {
        "2023c": {
            "Test/Fixed": {"standard_offset": "+05:30"},
            "Test/London": {
                "standard_offset": "Z",
                "transitions": [
                    {
                        "local": "2008-03-30T01:00:00",
                        "offset_before": "Z",
                        "offset_after": "+01:00",
                    },
                    {
                        "local": "2008-10-26T02:00:00",
                        "offset_before": "+01:00",
                        "offset_after": "Z",
                    },
                ],
            },
        },
        "2024a": {
            "Test/Fixed": {"standard_offset": "+05:45"},
            "Test/London": {
                "standard_offset": "Z",
                "transitions": [
                    {
                        "local": "2008-03-30T01:00:00",
                        "offset_before": "Z",
                        "offset_after": "+01:00",
                    },
                    {
                        "local": "2008-10-26T02:00:00",
                        "offset_before": "+01:00",
                        "offset_after": "Z",
                    },
                ],
                "rules": [
                    {
                        "month": 3,
                        "day_of_month_indicator": -1,
                        "day_of_week": 6,
                        "time": "01:00:00",
                        "time_definition": "UTC",
                        "standard_offset": "Z",
                        "offset_before": "Z",
                        "offset_after": "+01:00",
                    },
                    {
                        "month": 10,
                        "day_of_month_indicator": -1,
                        "day_of_week": 6,
                        "time": "01:00:00",
                        "time_definition": "UTC",
                        "standard_offset": "Z",
                        "offset_before": "+01:00",
                        "offset_after": "Z",
                    },
                ],
            },
        },
    }
}


@pytest.fixture(name="tzdata_provider", scope="session")
def mock_tzdata_provider() -> TzdataRulesProvider:
    """Fixture for a provider of the IANA time zone database."""
    return TzdataRulesProvider()


@pytest.fixture(name="registry")
def mock_registry(tzdata_provider: TzdataRulesProvider) -> RulesRegistry:
    """Fixture for a registry with rules for the IANA time zone database."""
    return RulesRegistry([tzdata_provider])


@pytest.fixture(name="document_provider")
def mock_document_provider() -> DocumentRulesProvider:
    """Fixture for a provider of rules from a test document."""
    return DocumentRulesProvider.from_dict(TEST_DOCUMENT)


@pytest.fixture(name="tzdata_content")
def mock_tzdata_content() -> Callable[[str], bytes]:
    """Fixture to read the raw TZif file for a key from the tzdata package."""

    def read(key: str) -> bytes:
        package = "tzdata.zoneinfo"
        resource = key
        if "/" in key:
            package_loc, resource = key.rsplit("/", 1)
            package += "." + package_loc.replace("/", ".")
        return resources.files(package).joinpath(resource).read_bytes()

    return read
