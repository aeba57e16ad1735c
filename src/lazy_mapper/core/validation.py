"""Runtime type checks applied to every value written into a model attribute."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Final

from lazy_mapper.core.naming import humanize_list
from lazy_mapper.errors import TypeMismatchError

NONE_TYPE: Final[type[None]] = type(None)

# Iterable, but never accepted as a collection value.
_SCALAR_ITERABLES: Final[tuple[type, ...]] = (str, bytes, bytearray, Mapping)


def type_names(types: Iterable[type], *, allow_nil: bool = False) -> list[str]:
    names = [item.__name__ for item in types]
    if allow_nil and NONE_TYPE.__name__ not in names:
        names.append(NONE_TYPE.__name__)
    return names


def describe_types(types: Iterable[type], *, allow_nil: bool = False) -> str:
    """Return ``"int"``, ``"int and NoneType"``, ``"str, int and NoneType"``..."""
    return humanize_list(type_names(types, allow_nil=allow_nil))


def is_collection(value: object) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, _SCALAR_ITERABLES)


def check_type(
    value: object,
    types: tuple[type, ...],
    *,
    allow_nil: bool,
    model: str,
    attribute: str,
) -> None:
    """Fail with :class:`TypeMismatchError` unless ``value`` is one of ``types``."""
    if value is None and allow_nil:
        return
    if isinstance(value, types):
        return
    raise TypeMismatchError(
        _mismatch_message(value, describe_types(types, allow_nil=allow_nil), model, attribute),
        model=model,
        attribute=attribute,
        expected=(*types, NONE_TYPE) if allow_nil else types,
        value=value,
    )


def check_collection(value: object, *, model: str, attribute: str) -> None:
    """Fail unless ``value`` is a non-string, non-mapping iterable."""
    if is_collection(value):
        return
    raise TypeMismatchError(
        _mismatch_message(value, Iterable.__name__, model, attribute),
        model=model,
        attribute=attribute,
        expected=(Iterable,),
        value=value,
    )


def _mismatch_message(value: object, permitted: str, model: str, attribute: str) -> str:
    return (
        f"{model}.{attribute}: {value!r} is a {type(value).__name__}, "
        f"but the permitted types are {permitted}"
    )


__all__ = [
    "NONE_TYPE",
    "check_collection",
    "check_type",
    "describe_types",
    "is_collection",
    "type_names",
]
