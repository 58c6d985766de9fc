"""
.. include:: ../README.md
"""

__all__ = [
    "offset",
    "zone_id",
    "transition",
    "transition_rule",
    "rule_set",
    "registry",
    "document",
    "tzinfo",
    "tzif",
    "compat",
    "exceptions",
    "util",
]
