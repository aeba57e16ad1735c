"""Side-effect free, cycle-safe textual rendering of model instances."""

from __future__ import annotations

import contextvars
from collections.abc import Callable, Iterable
from typing import Final

_ELLIPSIS: Final[str] = "..."

# Ids of the instances being rendered further up the current call stack.
_ACTIVE_RENDERS: contextvars.ContextVar[frozenset[int]] = contextvars.ContextVar(
    "lazy_mapper_active_renders", default=frozenset()
)


def render_instance(
    instance: object,
    present_items: Callable[[], Iterable[tuple[str, object]]],
) -> str:
    """Render ``<Name attr: value, ... >`` from the already materialized items.

    Re-entering an instance that is already being rendered yields ``<Name ... >``.
    """
    name = type(instance).__name__
    active = _ACTIVE_RENDERS.get()
    marker = id(instance)
    if marker in active:
        return f"<{name} {_ELLIPSIS} >"

    token = _ACTIVE_RENDERS.set(active | {marker})
    try:
        parts = [f"{attribute}: {value!r}" for attribute, value in present_items()]
    finally:
        _ACTIVE_RENDERS.reset(token)

    if not parts:
        return f"<{name} >"
    return f"<{name} {', '.join(parts)} >"


def is_rendering(instance: object) -> bool:
    return id(instance) in _ACTIVE_RENDERS.get()


__all__ = ["is_rendering", "render_instance"]
