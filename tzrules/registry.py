"""Registry of zone rules loaded from pluggable providers.

A registry is constructed once with the providers that supply rule data and
then passed to whatever needs to resolve region zone ids. Rules for a key
are loaded lazily from the first provider that recognizes the key and are
cached for the lifetime of the registry.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .exceptions import UnknownZoneError
from .rule_set import RuleSet

__all__ = [
    "RulesProvider",
    "RulesRegistry",
]

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class RulesProvider(Protocol):
    """A source of zone rules, such as a compiled time zone database."""

    def recognizes(self, key: str) -> bool:
        """Return True if the provider has rules for the key."""

    def load(self, key: str, version_hint: str | None) -> RuleSet:
        """Load the rules for the key.

        The version hint selects a specific version of the rules when the
        provider stores more than one, with None meaning the latest. Providers
        without versions ignore the hint.
        """

    def available_keys(self) -> set[str]:
        """Return the set of keys the provider has rules for."""


class RulesRegistry:
    """A cache of zone rules backed by one or more providers.

    Lookups are safe to call from multiple threads. The first load of a key
    is serialized with a per key lock and the cache only ever holds fully
    constructed rules.
    """

    def __init__(self, providers: Iterable[RulesProvider] = ()) -> None:
        """Initialize RulesRegistry."""
        self._providers: list[RulesProvider] = list(providers)
        self._cache: dict[tuple[str, str | None], RuleSet] = {}
        self._locks: dict[tuple[str, str | None], threading.Lock] = {}
        self._lock = threading.Lock()

    def register(self, provider: RulesProvider) -> None:
        """Add a provider consulted after the existing providers."""
        with self._lock:
            self._providers = [*self._providers, provider]
        _LOGGER.debug("Registered zone rules provider %s", provider)

    @property
    def providers(self) -> list[RulesProvider]:
        """Return the registered providers in lookup order."""
        return list(self._providers)

    def available_ids(self) -> set[str]:
        """Return the union of keys known to all providers."""
        result: set[str] = set()
        for provider in self._providers:
            result |= provider.available_keys()
        return result

    def get_rules(self, key: str, version: str | None = None) -> RuleSet:
        """Return the rules for the key, loading them on first use.

        The version pins a specific version of the rules where a provider
        supports versions, otherwise the latest rules are returned.
        """
        cache_key = (key, version)
        if (rules := self._cache.get(cache_key)) is not None:
            return rules
        with self._lock:
            key_lock = self._locks.setdefault(cache_key, threading.Lock())
        try:
            with key_lock:
                if (rules := self._cache.get(cache_key)) is not None:
                    return rules
                rules = self._load(key, version)
                self._cache[cache_key] = rules
        finally:
            # Loaded rules are served from the cache and failures are retried
            with self._lock:
                if self._locks.get(cache_key) is key_lock:
                    del self._locks[cache_key]
        return rules

    def _load(self, key: str, version: str | None) -> RuleSet:
        """Load the rules from the first provider that recognizes the key."""
        for provider in self._providers:
            if provider.recognizes(key):
                _LOGGER.debug("Loading zone rules for %s from %s", key, provider)
                return provider.load(key, version)
        raise UnknownZoneError(f"Unknown time-zone ID: {key}")
