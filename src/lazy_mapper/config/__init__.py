"""
lazy-mapper config package public API.

File: src/lazy_mapper/config/__init__.py

Purpose
- Export settings loading/validation entrypoints and public error types.

What should be included in this file
- The settings value object and its validation types.
- Loader APIs and the process-wide active settings accessors.

Functional requirements
- Support loading from ``lazy_mapper.toml`` + ``LAZY_MAPPER_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from lazy_mapper.config.active import (
    config_scope,
    get_active_config,
    set_active_config,
)
from lazy_mapper.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    load_config,
    load_config_file,
)
from lazy_mapper.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    ConfigValidationIssue,
    KeyStyle,
    MapperConfig,
    default_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "KeyStyle",
    "MapperConfig",
    "config_scope",
    "default_config",
    "dump_effective_config",
    "get_active_config",
    "load_config",
    "load_config_file",
    "set_active_config",
    "validate_config",
]
