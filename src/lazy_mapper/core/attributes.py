"""Attribute declarations: ``one``, ``is_``/``has`` and ``many``.

A declaration placed in a model class body is a descriptor. When the class is
created the model binds every descriptor to an immutable :class:`AttributeSpec`
holding the declared types, the raw record key, nullability, the default
override and the declaration-site coercion. The descriptor then routes reads
and writes to the owning instance's memoizer.
"""

from __future__ import annotations

import types as pytypes
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final, Union, get_args, get_origin

from lazy_mapper.core.coercion import Coercion, CoercionFn, as_coercion, to_bool
from lazy_mapper.core.registry import TypeKey
from lazy_mapper.core.validation import NONE_TYPE

if TYPE_CHECKING:
    from lazy_mapper.core.model import Model


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Final[Any] = _Unset()
_TRUTHINESS: Final[Coercion] = Coercion(to_bool)


class AttributeKind(StrEnum):
    ONE = "one"
    FLAG = "flag"
    MANY = "many"


@dataclass(frozen=True, slots=True)
class AttributeSpec:
    """Declared metadata for one attribute of a model class."""

    name: str
    kind: AttributeKind
    declared_types: tuple[type, ...]
    source_key: str
    allow_nil: bool
    default: Any = UNSET
    coercion: Coercion | None = None

    @property
    def registry_key(self) -> TypeKey:
        if len(self.declared_types) == 1:
            return self.declared_types[0]
        return self.declared_types

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    @property
    def is_collection(self) -> bool:
        return self.kind is AttributeKind.MANY


class Attribute:
    """Descriptor produced by a declaration; bound to its spec at class creation."""

    __slots__ = (
        "allow_nil",
        "coercion",
        "declared_types",
        "default",
        "kind",
        "name",
        "source_key",
        "spec",
    )

    def __init__(
        self,
        kind: AttributeKind,
        declared_types: tuple[type, ...],
        *,
        source_key: str | None,
        coercion: Coercion | None,
        default: Any,
        allow_nil: bool,
    ) -> None:
        self.kind = kind
        self.declared_types = declared_types
        self.source_key = source_key
        self.coercion = coercion
        self.default = default
        self.allow_nil = allow_nil
        self.name: str | None = None
        self.spec: AttributeSpec | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is not None and self.name != name:
            raise TypeError(
                f"attribute declaration already bound as {self.name!r}, cannot rebind as {name!r}"
            )
        self.name = name

    def bind(self, source_key: str) -> AttributeSpec:
        if self.name is None:
            raise TypeError("attribute declaration must be assigned in a class body")
        self.spec = AttributeSpec(
            name=self.name,
            kind=self.kind,
            declared_types=self.declared_types,
            source_key=self.source_key if self.source_key is not None else source_key,
            allow_nil=self.allow_nil,
            default=self.default,
            coercion=self.coercion,
        )
        return self.spec

    def __get__(self, instance: Model | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance._read_attribute(self._bound_spec())

    def __set__(self, instance: Model, value: object) -> None:
        instance._write_attribute(self._bound_spec(), value)

    def __delete__(self, instance: Model) -> None:
        raise AttributeError(f"{type(instance).__name__}.{self.name} cannot be deleted")

    def __repr__(self) -> str:
        type_names = ", ".join(item.__name__ for item in self.declared_types)
        return f"<{self.kind.value} {self.name or '?'}: {type_names}>"

    def _bound_spec(self) -> AttributeSpec:
        if self.spec is None:
            raise TypeError(f"attribute {self.name!r} is declared outside a Model subclass")
        return self.spec


def one(
    types: Any,
    *,
    source_key: str | None = None,
    coercion: CoercionFn | Coercion | None = None,
    default: Any = UNSET,
    allow_nil: bool = True,
    pass_instance: bool = False,
) -> Any:
    """Declare a single-valued attribute.

    ``types`` is a type, a tuple/list of types, or a ``X | Y`` union. A union
    member of ``None`` makes the attribute nullable regardless of ``allow_nil``.
    """
    declared, nullable = normalize_types(types)
    return Attribute(
        AttributeKind.ONE,
        declared,
        source_key=source_key,
        coercion=_declared_coercion(coercion, pass_instance),
        default=default,
        allow_nil=allow_nil or nullable,
    )


def is_(
    *,
    source_key: str | None = None,
    coercion: CoercionFn | Coercion | None = None,
    default: bool = False,
    pass_instance: bool = False,
) -> Any:
    """Declare a boolean attribute; never ``None``, ``False`` when absent.

    Without ``coercion`` the raw value is converted by truthiness, ahead of any
    instance or registry mapper.
    """
    declared = _declared_coercion(coercion, pass_instance)
    return Attribute(
        AttributeKind.FLAG,
        (bool,),
        source_key=source_key,
        coercion=declared if declared is not None else _TRUTHINESS,
        default=default,
        allow_nil=False,
    )


has = is_


def many(
    types: Any,
    *,
    source_key: str | None = None,
    coercion: CoercionFn | Coercion | None = None,
    default: Any = UNSET,
    pass_instance: bool = False,
) -> Any:
    """Declare a collection attribute whose elements are coerced one by one."""
    declared, _ = normalize_types(types)
    return Attribute(
        AttributeKind.MANY,
        declared,
        source_key=source_key,
        coercion=_declared_coercion(coercion, pass_instance),
        default=default,
        allow_nil=False,
    )


def normalize_types(types: Any) -> tuple[tuple[type, ...], bool]:
    """Return ``(declared_types, includes_none)`` for a declaration's type argument."""
    if get_origin(types) in (Union, pytypes.UnionType):
        members: tuple[Any, ...] = get_args(types)
    elif isinstance(types, (tuple, list)):
        members = tuple(types)
    else:
        members = (types,)

    declared: list[type] = []
    nullable = False
    for member in members:
        if member is None or member is NONE_TYPE:
            nullable = True
            continue
        if not isinstance(member, type):
            raise TypeError(f"attribute type must be a class, got {member!r}")
        if member not in declared:
            declared.append(member)

    if not declared:
        raise TypeError("attribute declaration needs at least one non-None type")
    return tuple(declared), nullable


def _declared_coercion(
    coercion: CoercionFn | Coercion | None,
    pass_instance: bool,
) -> Coercion | None:
    if coercion is None:
        if pass_instance:
            raise TypeError("pass_instance requires a coercion")
        return None
    return as_coercion(coercion, pass_instance=pass_instance)


__all__ = [
    "UNSET",
    "Attribute",
    "AttributeKind",
    "AttributeSpec",
    "has",
    "is_",
    "many",
    "normalize_types",
    "one",
]
