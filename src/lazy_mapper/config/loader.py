"""
lazy-mapper — runtime settings loader.

File: src/lazy_mapper/config/loader.py

Purpose
- Load effective settings from defaults, an optional TOML file, env vars, and
  explicit overrides.

What should be included in this file
- Precedence logic: overrides > env (LAZY_MAPPER_) > file > defaults.
- TOML loading via ``tomllib``.
- Deterministic environment variable mapping and coercion.

Functional requirements
- Reject invalid settings via schema validation.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

from lazy_mapper.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    MapperConfig,
    merge_config,
    validate_config,
)
from lazy_mapper.errors import LazyMapperError

DEFAULT_CONFIG_FILE: Final[str] = "lazy_mapper.toml"
ENV_PREFIX: Final[str] = "LAZY_MAPPER_"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


@dataclass(frozen=True, slots=True)
class _Binding:
    key: str
    value_type: Literal["str", "bool"]


class ConfigLoadError(LazyMapperError, ValueError):
    """Raised when settings cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> MapperConfig:
    """Load effective settings with deterministic precedence: overrides > env > file > defaults."""

    resolved_path = _resolve_config_path(config_path)
    explicit_path = config_path is not None
    env_map = dict(os.environ if environ is None else environ)

    file_payload = _load_toml_file(resolved_path, required=explicit_path)

    merged = merge_config(DEFAULT_CONFIG, file_payload)
    merged = merge_config(merged, _collect_env_overrides(env_map))
    merged = merge_config(merged, dict(overrides or {}))

    try:
        return validate_config(merged)
    except ConfigValidationError as exc:
        raise ConfigLoadError(str(exc)) from exc


def load_config_file(path: str | Path) -> MapperConfig:
    """Load settings from a specific TOML file path."""

    return load_config(path)


def dump_effective_config(config: MapperConfig) -> str:
    """Return a deterministic JSON dump of the effective settings."""

    return json.dumps(config.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    # A dedicated [lazy_mapper] table wins over top-level keys.
    section = parsed.get("lazy_mapper", parsed)
    if not isinstance(section, dict):
        raise ConfigLoadError(f"[lazy_mapper] must be a table: {path}")

    return section


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    bindings = _build_bindings()
    overrides: dict[str, Any] = {}
    for env_name in sorted(bindings):
        raw = environ.get(env_name)
        if raw is None:
            continue
        binding = bindings[env_name]
        overrides[binding.key] = _coerce_env(raw, binding.value_type, env_name, binding.key)
    return overrides


def _build_bindings() -> dict[str, _Binding]:
    bindings: dict[str, _Binding] = {}
    for key, value in sorted(DEFAULT_CONFIG.items()):
        kind: Literal["str", "bool"] = "bool" if isinstance(value, bool) else "str"
        bindings[_env_name_for_key(key)] = _Binding(key=key, value_type=kind)
    return bindings


def _coerce_env(
    raw: str,
    value_type: Literal["str", "bool"],
    env_name: str,
    key: str,
) -> object:
    value = raw.strip()
    if value_type == "str":
        return value

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(f"{env_name} -> {key} must be a boolean (true/false/1/0/yes/no/on/off)")


def _env_name_for_key(key: str) -> str:
    return ENV_PREFIX + key.upper()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "load_config",
    "load_config_file",
]
