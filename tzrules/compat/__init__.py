"""Compatibility layer for resolving zone ids that are not in the canonical form.

This module provides context managers that relax how zone ids are resolved.
"""

from .zone_compat import enable_short_ids, is_short_ids_enabled

__all__ = [
    "enable_short_ids",
    "is_short_ids_enabled",
]
