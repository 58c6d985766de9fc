"""Rules provider for the compiled IANA time zone database (TZif files)."""

from .timezoneinfo import TzdataRulesProvider

__all__ = [
    "TzdataRulesProvider",
]
