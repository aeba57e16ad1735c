"""Process-wide settings consulted when models are declared and instantiated.

Nothing is read from files or the environment here. The built-in defaults stay
active until a caller installs other settings, for example
``set_active_config(load_config())``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from lazy_mapper.config.schema import MapperConfig, default_config

_ACTIVE_LOCK = threading.Lock()
_ACTIVE_CONFIG: MapperConfig = default_config()


def get_active_config() -> MapperConfig:
    """Return the installed settings, or the built-in defaults."""
    with _ACTIVE_LOCK:
        return _ACTIVE_CONFIG


def set_active_config(config: MapperConfig) -> MapperConfig:
    """Install ``config`` as the active settings and return the previous value."""
    if not isinstance(config, MapperConfig):
        raise TypeError(f"expected MapperConfig, got {type(config).__name__}")
    global _ACTIVE_CONFIG
    with _ACTIVE_LOCK:
        previous = _ACTIVE_CONFIG
        _ACTIVE_CONFIG = config
        return previous


@contextmanager
def config_scope(config: MapperConfig) -> Iterator[MapperConfig]:
    """Temporarily activate ``config``."""
    previous = set_active_config(config)
    try:
        yield config
    finally:
        set_active_config(previous)


__all__ = [
    "config_scope",
    "get_active_config",
    "set_active_config",
]
