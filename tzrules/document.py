"""A rules provider for zone rules described in a JSON compatible document.

This is useful for tests and for applications that ship their own rules
rather than relying on the installed time zone database. The document
holds one or more versions of the rules, and each version maps a zone key
to its offset history and recurring rules:

    {
      "versions": {
        "2024a": {
          "Test/Zone": {
            "standard_offset": "Z",
            "transitions": [
              {"local": "2008-03-30T01:00", "offset_before": "Z", "offset_after": "+01:00"}
            ],
            "rules": [...]
          }
        }
      }
    }

Offsets use the offset id text, e.g. "+01:00". Versions are compared as
text so that IANA style names like 2023c and 2024a sort in release order,
and the greatest version is used when no version is requested.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    ValidationError,
    field_validator,
)

from .exceptions import TimezoneInfoError, UnknownZoneError
from .offset import Offset
from .rule_set import MAX_RULES, RuleSet
from .transition import Transition
from .transition_rule import TimeDefinition, TransitionRule

__all__ = [
    "DocumentRulesProvider",
    "RulesDocument",
    "TransitionModel",
    "TransitionRuleModel",
    "ZoneRulesModel",
]

_LOGGER = logging.getLogger(__name__)


def _parse_offset(value: Any) -> Offset:
    """Parse an offset from its id text."""
    if isinstance(value, Offset):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected offset id text, got: {value!r}")
    return Offset.parse(value)


OffsetField = Annotated[
    Offset,
    PlainValidator(_parse_offset),
    PlainSerializer(lambda value: value.id, return_type=str),
]


class TransitionModel(BaseModel):
    """A transition at a local date-time."""

    local: datetime.datetime
    """The local date-time of the transition in the offset before."""

    offset_before: OffsetField
    """The offset in effect before the transition."""

    offset_after: OffsetField
    """The offset in effect after the transition."""

    def to_transition(self) -> Transition:
        """Return the Transition described by the model."""
        return Transition(self.local, self.offset_before, self.offset_after)


class TransitionRuleModel(BaseModel):
    """A rule for creating a transition every year."""

    month: int = Field(ge=1, le=12)
    """The month of the transition."""

    day_of_month_indicator: int = Field(ge=-28, le=31)
    """The day of month, negative values count back from the end of the month."""

    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    """The weekday (Monday is 0) the transition is adjusted to, if any."""

    time: datetime.timedelta = datetime.timedelta(0)
    """The time of day of the transition."""

    time_definition: TimeDefinition = TimeDefinition.WALL
    """How the time of day is interpreted."""

    standard_offset: OffsetField
    """The standard offset in effect at the transition."""

    offset_before: OffsetField
    """The offset before the transition."""

    offset_after: OffsetField
    """The offset after the transition."""

    def to_rule(self) -> TransitionRule:
        """Return the TransitionRule described by the model."""
        return TransitionRule(
            month=self.month,
            day_of_month_indicator=self.day_of_month_indicator,
            day_of_week=self.day_of_week,
            time=self.time,
            time_definition=self.time_definition,
            standard_offset=self.standard_offset,
            offset_before=self.offset_before,
            offset_after=self.offset_after,
        )


class ZoneRulesModel(BaseModel):
    """The complete rules for a single zone."""

    standard_offset: OffsetField
    """The standard offset before the first standard transition."""

    wall_offset: Optional[OffsetField] = None
    """The wall offset before the first transition, defaults to the standard offset."""

    standard_transitions: list[TransitionModel] = Field(default_factory=list)
    """Changes to the standard offset in ascending order."""

    transitions: list[TransitionModel] = Field(default_factory=list)
    """Changes to the wall offset in ascending order."""

    rules: list[TransitionRuleModel] = Field(
        default_factory=list, max_length=MAX_RULES
    )
    """Rules for transitions after the last transition."""

    def to_rule_set(self) -> RuleSet:
        """Return the RuleSet described by the model."""
        return RuleSet(
            self.standard_offset,
            self.wall_offset or self.standard_offset,
            [trans.to_transition() for trans in self.standard_transitions],
            [trans.to_transition() for trans in self.transitions],
            [rule.to_rule() for rule in self.rules],
        )


class RulesDocument(BaseModel):
    """A document with one or more versions of the rules for a set of zones."""

    versions: dict[str, dict[str, ZoneRulesModel]]
    """The zone rules keyed by version then by zone key."""

    model_config = ConfigDict(frozen=True)

    @field_validator("versions")
    @classmethod
    def _check_versions(
        cls, value: dict[str, dict[str, ZoneRulesModel]]
    ) -> dict[str, dict[str, ZoneRulesModel]]:
        """Validate the document has at least one version."""
        if not value:
            raise ValueError("Rules document must contain at least one version")
        return value

    @property
    def latest_version(self) -> str:
        """Return the greatest version in the document."""
        return max(self.versions)


class DocumentRulesProvider:
    """Provides zone rules from a RulesDocument.

    A version hint pins the version of the rules that is loaded, otherwise
    the latest version is used.
    """

    def __init__(self, document: RulesDocument) -> None:
        """Initialize DocumentRulesProvider."""
        self._document = document

    @classmethod
    def from_dict(cls, content: Mapping[str, Any]) -> DocumentRulesProvider:
        """Create a provider from a parsed JSON document."""
        try:
            return cls(RulesDocument.model_validate(content))
        except ValidationError as err:
            raise TimezoneInfoError(f"Invalid rules document: {err}") from err

    @classmethod
    def from_json(cls, content: str | bytes) -> DocumentRulesProvider:
        """Create a provider from JSON text."""
        try:
            return cls(RulesDocument.model_validate_json(content))
        except ValidationError as err:
            raise TimezoneInfoError(f"Invalid rules document: {err}") from err

    @property
    def document(self) -> RulesDocument:
        """Return the document the rules are read from."""
        return self._document

    @property
    def versions(self) -> list[str]:
        """Return the versions in the document in ascending order."""
        return sorted(self._document.versions)

    def recognizes(self, key: str) -> bool:
        """Return True if any version of the document has rules for the key."""
        return any(key in zones for zones in self._document.versions.values())

    def available_keys(self) -> set[str]:
        """Return the keys found in any version of the document."""
        result: set[str] = set()
        for zones in self._document.versions.values():
            result |= set(zones)
        return result

    def load(self, key: str, version_hint: str | None = None) -> RuleSet:
        """Return the rules for the key at the requested or latest version."""
        version = version_hint or self._document.latest_version
        if (zones := self._document.versions.get(version)) is None:
            raise UnknownZoneError(
                f"Unknown time-zone ID: {key}, no rules version {version}"
            )
        if (zone := zones.get(key)) is None:
            raise UnknownZoneError(
                f"Unknown time-zone ID: {key}, not in rules version {version}"
            )
        _LOGGER.debug("Loading rules for %s from version %s", key, version)
        try:
            return zone.to_rule_set()
        except ValueError as err:
            raise TimezoneInfoError(
                f"Invalid rules for {key} in version {version}: {err}"
            ) from err

    def __repr__(self) -> str:
        return f"DocumentRulesProvider(versions={self.versions!r})"
