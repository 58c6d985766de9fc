"""Compatibility layer for resolving legacy short zone ids."""

from collections.abc import Generator
import contextlib
import contextvars


_short_ids = contextvars.ContextVar("short_ids", default=False)


@contextlib.contextmanager
def enable_short_ids() -> Generator[None]:
    """Context manager to allow legacy three letter zone ids such as EST or PST."""
    token = _short_ids.set(True)
    try:
        yield
    finally:
        _short_ids.reset(token)


def is_short_ids_enabled() -> bool:
    """Check if resolving short zone ids is enabled."""
    return _short_ids.get()
