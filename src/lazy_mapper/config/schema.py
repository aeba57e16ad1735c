"""
lazy-mapper — runtime settings schema.

File: src/lazy_mapper/config/schema.py

Purpose
- Define the settings that tune how models derive source keys, guard
  materialization, and log.

What should be included in this file
- The frozen ``MapperConfig`` value object and its built-in defaults.
- Strict validation of untrusted payloads (TOML, env, overrides) with
  structured issues.

Functional requirements
- Unknown keys and wrongly typed values are rejected, every issue reported at once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any, Final, TypedDict

from lazy_mapper.errors import LazyMapperError


class KeyStyle(StrEnum):
    """Rule used to derive a raw record key from an attribute name."""

    CAMEL = "camel"
    IDENTITY = "identity"


class MapperConfigPayload(TypedDict, total=False):
    key_style: str
    thread_safe: bool
    log_level: str
    log_json: bool


@dataclass(frozen=True, slots=True)
class MapperConfig:
    """Effective runtime settings."""

    key_style: KeyStyle = KeyStyle.CAMEL
    thread_safe: bool = True
    log_level: str = "WARNING"
    log_json: bool = True

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["key_style"] = str(self.key_style)
        return payload


DEFAULT_CONFIG: Final[MapperConfigPayload] = {
    "key_style": KeyStyle.CAMEL.value,
    "thread_safe": True,
    "log_level": "WARNING",
    "log_json": True,
}

CONFIG_KEYS: Final[frozenset[str]] = frozenset(DEFAULT_CONFIG)


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


class ConfigValidationError(LazyMapperError, ValueError):
    """Raised when strict settings validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid lazy_mapper config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> MapperConfig:
    """Return the built-in defaults."""

    return MapperConfig()


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Return ``base`` with the keys of ``overlay`` applied on top."""

    merged: dict[str, Any] = dict(base)
    merged.update(overlay)
    return merged


def validate_config(payload: Mapping[str, object]) -> MapperConfig:
    """Validate a settings payload, filling gaps from the defaults."""

    issues = _IssueCollector()
    if not isinstance(payload, Mapping):
        issues.add("$", f"expected object, got {type(payload).__name__}")
        raise ConfigValidationError(issues.items())

    for key in sorted(str(item) for item in payload if item not in CONFIG_KEYS):
        issues.add(key, "unknown setting")

    merged = merge_config(DEFAULT_CONFIG, payload)

    key_style = _as_key_style(merged.get("key_style"), "key_style", issues)
    thread_safe = _as_bool(merged.get("thread_safe"), "thread_safe", issues)
    log_level = _as_log_level(merged.get("log_level"), "log_level", issues)
    log_json = _as_bool(merged.get("log_json"), "log_json", issues)

    if (
        issues.has_issues
        or key_style is None
        or thread_safe is None
        or log_level is None
        or log_json is None
    ):
        raise ConfigValidationError(issues.items())

    return MapperConfig(
        key_style=key_style,
        thread_safe=thread_safe,
        log_level=log_level,
        log_json=log_json,
    )


def _as_key_style(value: object, path: str, issues: _IssueCollector) -> KeyStyle | None:
    if isinstance(value, KeyStyle):
        return value
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    try:
        return KeyStyle(value.strip().lower())
    except ValueError:
        allowed = ", ".join(style.value for style in KeyStyle)
        issues.add(path, f"must be one of: {allowed}")
        return None


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_log_level(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    normalized = value.strip().upper()
    if not isinstance(logging.getLevelName(normalized), int):
        issues.add(path, f"unsupported logging level {value!r}")
        return None
    return normalized


__all__ = [
    "CONFIG_KEYS",
    "DEFAULT_CONFIG",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "KeyStyle",
    "MapperConfig",
    "MapperConfigPayload",
    "default_config",
    "merge_config",
    "validate_config",
]
