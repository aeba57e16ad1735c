"""Per-model type registry: type token -> coercion and type token -> default value.

Each model class owns one registry. A subclass starts from a snapshot of its
parent's registry taken when the subclass is created; later registrations on
either side stay on that side.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, TypeAlias
from urllib.parse import SplitResult, urlsplit

from lazy_mapper.core.coercion import Coercion, CoercionFn, as_coercion, to_bool

TypeKey: TypeAlias = type | tuple[type, ...]


class TypeRegistry:
    """Mutable table of coercions and defaults keyed by type tokens."""

    __slots__ = ("_defaults", "_mappers")

    def __init__(
        self,
        mappers: Mapping[TypeKey, Coercion] | None = None,
        defaults: Mapping[TypeKey, object] | None = None,
    ) -> None:
        self._mappers: dict[TypeKey, Coercion] = dict(mappers or {})
        self._defaults: dict[TypeKey, object] = dict(defaults or {})

    @classmethod
    def builtin(cls) -> TypeRegistry:
        registry = cls()
        for key, fn in _BUILTIN_MAPPERS.items():
            registry.register_mapper(key, fn)
        for key, value in _BUILTIN_DEFAULTS.items():
            registry.register_default(key, value)
        return registry

    def derive(self) -> TypeRegistry:
        """Return an independent snapshot for a subclass."""
        return TypeRegistry(self._mappers, self._defaults)

    def register_mapper(self, key: TypeKey, fn: CoercionFn | Coercion) -> Coercion:
        coercion = as_coercion(fn)
        self._mappers[validate_type_key(key)] = coercion
        return coercion

    def register_default(self, key: TypeKey, value: object) -> None:
        # Stored as a private copy; readers deep-copy again on every materialization.
        self._defaults[validate_type_key(key)] = copy.deepcopy(value)

    def mapper_for(self, key: TypeKey) -> Coercion | None:
        return self._mappers.get(key)

    def has_default(self, key: TypeKey) -> bool:
        return key in self._defaults

    def default_for(self, key: TypeKey) -> Any:
        """Return a fresh deep copy of the default for ``key``, or ``None``."""
        return copy.deepcopy(self._defaults.get(key))

    def mappers(self) -> Mapping[TypeKey, Coercion]:
        return MappingProxyType(self._mappers)

    def defaults(self) -> Mapping[TypeKey, object]:
        return MappingProxyType(self._defaults)


def validate_type_key(key: object) -> TypeKey:
    if isinstance(key, type):
        return key
    if isinstance(key, tuple) and key and all(isinstance(item, type) for item in key):
        return key
    raise TypeError(f"type key must be a type or a non-empty tuple of types, got {key!r}")


def _identity(value: object) -> object:
    return value


def _to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _parse_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise TypeError(f"cannot parse {type(value).__name__} as an ISO-8601 datetime")
    return datetime.fromisoformat(value.strip())


def _parse_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise TypeError(f"cannot parse {type(value).__name__} as an ISO-8601 date")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def _to_dict(value: object) -> dict[Any, Any]:
    return dict(value)  # type: ignore[call-overload]


def _parse_url(value: object) -> SplitResult:
    if isinstance(value, SplitResult):
        return value
    return urlsplit(str(value))


_BUILTIN_MAPPERS: dict[TypeKey, CoercionFn] = {
    object: _identity,
    str: str,
    int: int,
    float: float,
    Decimal: _to_decimal,
    bool: to_bool,
    dict: _to_dict,
    datetime: _parse_datetime,
    date: _parse_date,
    SplitResult: _parse_url,
}

_BUILTIN_DEFAULTS: dict[TypeKey, object] = {
    str: "",
    int: 0,
    float: 0.0,
    Decimal: Decimal("0"),
    list: [],
}


__all__ = ["TypeKey", "TypeRegistry", "validate_type_key"]
