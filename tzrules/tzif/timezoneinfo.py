"""A rules provider backed by the IANA time zone database.

This package follows the same approach as zoneinfo for finding timezone
data, except that the tzdata python package is preferred over the system
TZPATH so that results are the same on every platform. The TZif data is
compiled into a RuleSet.
"""

from __future__ import annotations

import logging
import os
import zoneinfo
from collections.abc import Sequence
from functools import cache
from importlib import resources

from ..exceptions import TimezoneInfoError
from ..rule_set import RuleSet
from .compiler import compile_rules
from .model import TimezoneInfo
from .tzif import read_tzif

__all__ = [
    "TzdataRulesProvider",
]

_LOGGER = logging.getLogger(__name__)


@cache
def _read_tzdata_timezones() -> frozenset[str]:
    """Returns the set of valid timezones from tzdata only."""
    try:
        with resources.files("tzdata").joinpath("zones").open(
            "r", encoding="utf-8"
        ) as zones_file:
            return frozenset(
                line.strip() for line in zones_file.readlines() if line.strip()
            )
    except ModuleNotFoundError:
        return frozenset()


def _iana_key_to_resource(key: str) -> tuple[str, str]:
    """Returns the package and resource file for the specified timezone."""
    if "/" not in key:
        return "tzdata.zoneinfo", key
    package_loc, resource = key.rsplit("/", 1)
    package = "tzdata.zoneinfo." + package_loc.replace("/", ".")
    return package, resource


def _find_tzfile(tzpath: Sequence[str], key: str) -> str | None:
    """Retrieve the path to a TZif file from a key."""
    for search_path in tzpath:
        filepath = os.path.join(search_path, key)
        if os.path.isfile(filepath):
            return filepath
    return None


class TzdataRulesProvider:
    """Provides the rules for region ids such as Europe/London.

    The version hint passed when loading is ignored since only the rules of
    the installed database are available.
    """

    def __init__(
        self, tzpath: Sequence[str] | None = None, use_tzdata: bool = True
    ) -> None:
        """Initialize TzdataRulesProvider.

        The tzpath defaults to the zoneinfo TZPATH. The tzdata package is
        consulted first unless use_tzdata is False.
        """
        self._tzpath: tuple[str, ...] = tuple(
            zoneinfo.TZPATH if tzpath is None else tzpath
        )
        self._use_tzdata = use_tzdata
        self._keys: frozenset[str] | None = None

    def available_keys(self) -> set[str]:
        """Return the set of keys found in tzdata and on the TZPATH."""
        if self._keys is None:
            keys: set[str] = set()
            if self._use_tzdata:
                keys |= _read_tzdata_timezones()
            keys |= self._read_system_timezones()
            self._keys = frozenset(keys)
        return set(self._keys)

    def recognizes(self, key: str) -> bool:
        """Return True if the key is a known timezone."""
        return key in self.available_keys()

    def load(self, key: str, version_hint: str | None = None) -> RuleSet:
        """Read and compile the rules for the key."""
        if version_hint is not None:
            _LOGGER.debug("Ignoring version %s for timezone %s", version_hint, key)
        try:
            return compile_rules(self.read(key))
        except ValueError as err:
            raise TimezoneInfoError(f"Unable to compile timezone: {key}") from err

    def read(self, key: str) -> TimezoneInfo:
        """Read the TZif file for the key and return the timezone records."""
        _LOGGER.debug("Reading timezone: %s", key)
        # Keys are only used to build a path once known to be a timezone
        if not self.recognizes(key):
            raise TimezoneInfoError(f"Unable to find timezone: {key}")

        if self._use_tzdata and key in _read_tzdata_timezones():
            (package, resource) = _iana_key_to_resource(key)
            try:
                with resources.files(package).joinpath(resource).open(
                    "rb"
                ) as tzdata_file:
                    return read_tzif(tzdata_file.read())
            except ModuleNotFoundError:
                # Unexpected given we previously read the list of timezones
                pass
            except (ValueError, FileNotFoundError) as err:
                raise TimezoneInfoError(f"Unable to load tzdata module: {key}") from err

        # Fallback to zoneinfo file on local disk
        tzfile = _find_tzfile(self._tzpath, key)
        if tzfile is not None:
            with open(tzfile, "rb") as tzfile_file:
                try:
                    return read_tzif(tzfile_file.read())
                except ValueError as err:
                    raise TimezoneInfoError(
                        f"Unable to load tzdata file: {key}"
                    ) from err

        raise TimezoneInfoError(f"Unable to find timezone data for {key}")

    def _read_system_timezones(self) -> set[str]:
        """Read the set of timezones found on the TZPATH."""
        if tuple(zoneinfo.TZPATH) == self._tzpath:
            # Includes the tzdata package, which is filtered when disabled
            keys = zoneinfo.available_timezones()
            if not self._use_tzdata:
                keys = {
                    key for key in keys if _find_tzfile(self._tzpath, key) is not None
                }
            return keys
        return _walk_tzpath(self._tzpath)

    def __repr__(self) -> str:
        return f"TzdataRulesProvider(tzpath={self._tzpath!r})"


def _walk_tzpath(tzpath: Sequence[str]) -> set[str]:
    """Return the candidate keys of TZif files found under each search path."""
    keys: set[str] = set()
    for search_path in tzpath:
        if not os.path.isdir(search_path):
            continue
        for root, dirnames, files in os.walk(search_path):
            if root == search_path:
                # Not timezones, e.g. posix/ and right/ duplicates
                dirnames[:] = [d for d in dirnames if d not in ("posix", "right")]
            for filename in files:
                filepath = os.path.join(root, filename)
                if not _is_tzif(filepath):
                    continue
                keys.add(os.path.relpath(filepath, search_path).replace(os.sep, "/"))
    return keys


def _is_tzif(filepath: str) -> bool:
    """Return True if the file starts with the TZif magic header."""
    try:
        with open(filepath, "rb") as tzfile:
            return tzfile.read(4) == b"TZif"
    except OSError:
        return False
