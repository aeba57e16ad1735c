"""Coercion wrappers with an explicit value-only or value-plus-instance calling convention."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

CoercionFn = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Coercion:
    """A coercion function plus the flag selecting how it is called.

    Value-only coercions are called as ``fn(value)``; contextual ones as
    ``fn(value, instance)`` so they can consult sibling attributes.
    """

    fn: CoercionFn
    pass_instance: bool = False

    def __call__(self, value: object, instance: object) -> Any:
        if self.pass_instance:
            return self.fn(value, instance)
        return self.fn(value)


def as_coercion(fn: CoercionFn | Coercion, *, pass_instance: bool = False) -> Coercion:
    """Wrap ``fn`` unless it already is a :class:`Coercion`."""
    if isinstance(fn, Coercion):
        if pass_instance and not fn.pass_instance:
            return Coercion(fn.fn, pass_instance=True)
        return fn
    if not callable(fn):
        raise TypeError(f"coercion must be callable, got {type(fn).__name__}")
    return Coercion(fn, pass_instance=pass_instance)


def contextual(fn: CoercionFn) -> Coercion:
    """Mark ``fn`` as taking ``(value, instance)``."""
    return as_coercion(fn, pass_instance=True)


def to_bool(value: object) -> bool:
    return bool(value)


__all__ = ["Coercion", "CoercionFn", "as_coercion", "contextual", "to_bool"]
