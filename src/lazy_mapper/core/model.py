"""Model base class: lazy, memoized, type-checked mapping of a raw record.

Subclasses declare attributes with :func:`~lazy_mapper.core.attributes.one`,
:func:`~lazy_mapper.core.attributes.is_` / ``has`` and
:func:`~lazy_mapper.core.attributes.many`::

    class Invoice(Model):
        id = one(int, source_key="xmlId")
        created_at = one(datetime)
        paid = is_()
        lines = many(Line, coercion=Line.from_record)

    invoice = Invoice.from_record({"xmlId": "7", "createdAt": "2015-07-29T14:07:35+02:00"})

Each attribute is computed on first read and cached for the lifetime of the
instance, ``None`` included. Coercions are resolved in this order: the
declaration-site coercion, an instance mapper for the attribute name, an
instance mapper for the declared type, the class registry entry for the
declared type.
"""

from __future__ import annotations

import copy
import logging
import threading
import warnings
from collections.abc import Callable, Iterator, Mapping
from contextlib import AbstractContextManager, nullcontext
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar

from lazy_mapper.config.active import get_active_config
from lazy_mapper.config.schema import KeyStyle
from lazy_mapper.core.attributes import Attribute, AttributeSpec
from lazy_mapper.core.coercion import Coercion, CoercionFn, as_coercion
from lazy_mapper.core.naming import source_key_for
from lazy_mapper.core.registry import TypeKey, TypeRegistry, validate_type_key
from lazy_mapper.core.rendering import render_instance
from lazy_mapper.core.validation import check_collection, check_type
from lazy_mapper.errors import (
    InvalidInputError,
    MaterializedAttributeError,
    MissingMapperError,
)

_LOGGER = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound="Model")
InstanceMapperKey = str | TypeKey

_SEQUENCE_TYPES = (list, tuple)
_NO_LOCK: AbstractContextManager[None] = nullcontext()


class Model:
    """Base class for lazily mapped record wrappers."""

    __slots__ = ("__weakref__", "_computing", "_instance_mappers", "_lock", "_raw", "_values")

    _registry: ClassVar[TypeRegistry] = TypeRegistry.builtin()
    _own_attributes: ClassVar[dict[str, AttributeSpec]] = {}
    _key_style: ClassVar[KeyStyle | None] = None

    def __init_subclass__(cls, *, key_style: KeyStyle | str | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if key_style is not None:
            cls._key_style = KeyStyle(key_style)

        # Snapshot of the parent's registry, isolated from later changes on either side.
        cls._registry = cls._registry.derive()
        for key, fn in cls.__dict__.get("__mappers__", {}).items():
            cls._registry.register_mapper(key, fn)
        for key, value in cls.__dict__.get("__defaults__", {}).items():
            cls._registry.register_default(key, value)

        own: dict[str, AttributeSpec] = {}
        for name, member in cls.__dict__.items():
            if isinstance(member, Attribute):
                own[name] = member.bind(cls.map_name(name))
        cls._own_attributes = own

        _LOGGER.debug(
            "declared model %s",
            cls.__name__,
            extra={"model": cls.__name__, "attributes": list(own)},
        )

    def __init__(self, **values: Any) -> None:
        self._init_state({}, None)
        attributes = type(self).attributes()
        for name, value in values.items():
            spec = attributes.get(name)
            if spec is None:
                raise TypeError(
                    f"{type(self).__name__}() got an unexpected keyword argument {name!r}"
                )
            self._write_attribute(spec, value)

    # -- class-level API -------------------------------------------------

    @classmethod
    def from_record(
        cls: type[TModel],
        raw: Any,
        *,
        mappers: Mapping[InstanceMapperKey, CoercionFn | Coercion] | None = None,
    ) -> TModel | None:
        """Wrap ``raw`` without mapping anything yet; ``None`` maps to ``None``."""
        if raw is None:
            return None
        record = _as_record(cls.__name__, raw)
        instance = cls.__new__(cls)
        instance._init_state(record, mappers)
        return instance

    @classmethod
    def from_json(
        cls: type[TModel],
        raw: Any,
        *,
        mappers: Mapping[InstanceMapperKey, CoercionFn | Coercion] | None = None,
    ) -> TModel | None:
        warnings.warn(
            f"{cls.__name__}.from_json is deprecated. Use {cls.__name__}.from_record instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        _LOGGER.warning("deprecated from_json used", extra={"model": cls.__name__})
        return cls.from_record(raw, mappers=mappers)

    @classmethod
    def attributes(cls) -> dict[str, AttributeSpec]:
        """All declared attributes, parents first; a redeclared name keeps its parent slot."""
        merged: dict[str, AttributeSpec] = {}
        for klass in reversed(cls.__mro__):
            if issubclass(klass, Model):
                merged.update(klass.__dict__.get("_own_attributes", {}))
        return merged

    @classmethod
    def map_name(cls, name: str) -> str:
        """Raw record key for attribute ``name``; override for custom key rules."""
        style = cls._key_style if cls._key_style is not None else get_active_config().key_style
        return source_key_for(name, style)

    @classmethod
    def register_mapper(cls, key: TypeKey, fn: CoercionFn | Coercion) -> Coercion:
        """Register the class-level coercion for ``key``; subclasses created later inherit it."""
        return cls._registry.register_mapper(key, fn)

    @classmethod
    def register_default(cls, key: TypeKey, value: object) -> None:
        """Register the class-level default for ``key``; subclasses created later inherit it."""
        cls._registry.register_default(key, value)

    mapper_for = register_mapper
    default_value_for = register_default

    @classmethod
    def mappers(cls) -> Mapping[TypeKey, Coercion]:
        return cls._registry.mappers()

    @classmethod
    def default_values(cls) -> Mapping[TypeKey, object]:
        return cls._registry.defaults()

    # -- instance API ----------------------------------------------------

    @property
    def raw_record(self) -> Mapping[str, Any]:
        return MappingProxyType(self._raw)

    def add_mapper_for(
        self,
        key: InstanceMapperKey,
        fn: CoercionFn | Coercion | None = None,
    ) -> Any:
        """Register an instance-level coercion for an attribute name or a type.

        Without ``fn`` this returns a decorator.
        """
        if not isinstance(key, str):
            key = validate_type_key(key)
        if fn is None:

            def decorator(func: CoercionFn) -> CoercionFn:
                self._instance_mappers[key] = as_coercion(func)
                return func

            return decorator
        coercion = as_coercion(fn)
        self._instance_mappers[key] = coercion
        return coercion

    def materialized(self) -> tuple[str, ...]:
        """Names of attributes already memoized on this instance."""
        return tuple(self._values)

    def to_dict(self) -> dict[str, Any]:
        """Materialize every declared attribute and return them in declaration order."""
        return {name: self._read_attribute(spec) for name, spec in type(self).attributes().items()}

    def to_display_string(self) -> str:
        return render_instance(self, self._present_items)

    def __repr__(self) -> str:
        return self.to_display_string()

    def __copy__(self: TModel) -> TModel:
        clone = type(self).__new__(type(self))
        clone._init_state(self._raw, self._instance_mappers)
        clone._values.update(self._values)
        return clone

    def __deepcopy__(self: TModel, memo: dict[int, Any]) -> TModel:
        clone = type(self).__new__(type(self))
        memo[id(self)] = clone
        clone._init_state(copy.deepcopy(self._raw, memo), self._instance_mappers)
        clone._values.update(copy.deepcopy(self._values, memo))
        return clone

    # -- memoizer --------------------------------------------------------

    def _init_state(
        self,
        raw: Mapping[str, Any],
        mappers: Mapping[InstanceMapperKey, CoercionFn | Coercion] | None,
    ) -> None:
        self._raw: dict[str, Any] = dict(raw)
        self._instance_mappers: dict[InstanceMapperKey, Coercion] = {}
        self._values: dict[str, Any] = {}
        self._computing: set[str] = set()
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if get_active_config().thread_safe else _NO_LOCK
        )
        for key, fn in (mappers or {}).items():
            self.add_mapper_for(key, fn)

    def _read_attribute(self, spec: AttributeSpec) -> Any:
        values = self._values
        if spec.name in values:
            return values[spec.name]

        with self._lock:
            if spec.name in values:
                return values[spec.name]
            if spec.name in self._computing:
                raise RecursionError(
                    f"{type(self).__name__}.{spec.name} is read while it is being computed"
                )
            self._computing.add(spec.name)
            try:
                value = self._compute(spec)
                self._validate(spec, value)
                values[spec.name] = value
            finally:
                self._computing.discard(spec.name)
        return value

    def _write_attribute(self, spec: AttributeSpec, value: object) -> None:
        with self._lock:
            if spec.name in self._values:
                raise MaterializedAttributeError(type(self).__name__, spec.name)
            self._validate(spec, value)
            self._values[spec.name] = value

    def _compute(self, spec: AttributeSpec) -> Any:
        # An explicit None in the record reads exactly like an absent key.
        raw_value = self._raw.get(spec.source_key)
        if raw_value is None:
            return self._default_value(spec, "null" if spec.source_key in self._raw else "absent")

        if not spec.is_collection:
            self._trace(spec, "coerced")
            return self._coerce(spec, raw_value, spec.registry_key)

        if isinstance(raw_value, _SEQUENCE_TYPES):
            self._trace(spec, "coerced-elements")
            registry = type(self)._registry
            return [
                registry.default_for(spec.registry_key)
                if item is None
                else self._coerce(spec, item, spec.registry_key)
                for item in raw_value
            ]

        self._trace(spec, "coerced-as-list")
        return self._coerce(spec, raw_value, list)

    def _default_value(self, spec: AttributeSpec, reason: str) -> Any:
        self._trace(spec, f"default ({reason})")
        if spec.has_default:
            return copy.deepcopy(spec.default)
        return type(self)._registry.default_for(list if spec.is_collection else spec.registry_key)

    def _coerce(self, spec: AttributeSpec, raw_value: object, type_key: TypeKey) -> Any:
        coercion = self._resolve_coercion(spec, type_key)
        if coercion is None:
            _LOGGER.debug(
                "missing mapper",
                extra={"model": type(self).__name__, "attribute": spec.name, "type_key": type_key},
            )
            raise MissingMapperError(type(self).__name__, spec.name, type_key, raw_value)
        return coercion(raw_value, self)

    def _resolve_coercion(self, spec: AttributeSpec, type_key: TypeKey) -> Coercion | None:
        if spec.coercion is not None:
            return spec.coercion
        by_name = self._instance_mappers.get(spec.name)
        if by_name is not None:
            return by_name
        by_type = self._instance_mappers.get(type_key)
        if by_type is not None:
            return by_type
        return type(self)._registry.mapper_for(type_key)

    def _validate(self, spec: AttributeSpec, value: object) -> None:
        model = type(self).__name__
        if spec.is_collection:
            check_collection(value, model=model, attribute=spec.name)
        else:
            check_type(
                value,
                spec.declared_types,
                allow_nil=spec.allow_nil,
                model=model,
                attribute=spec.name,
            )

    def _present_items(self) -> Iterator[tuple[str, object]]:
        values = self._values
        for name in type(self).attributes():
            if name in values and values[name] is not None:
                yield name, values[name]

    def _trace(self, spec: AttributeSpec, path: str) -> None:
        _LOGGER.debug(
            "materializing %s.%s",
            type(self).__name__,
            spec.name,
            extra={
                "model": type(self).__name__,
                "attribute": spec.name,
                "source_key": spec.source_key,
                "path": path,
            },
        )


def _as_record(model: str, raw: object) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    for hook_name in ("to_dict", "_asdict"):
        hook: Callable[[], object] | None = getattr(raw, hook_name, None)
        if callable(hook):
            converted = hook()
            if isinstance(converted, Mapping):
                return converted
    raise InvalidInputError(model, raw)


__all__ = ["Model"]
