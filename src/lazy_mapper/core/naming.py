"""Attribute-name to record-key rules and natural-language list joining."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from lazy_mapper.config.schema import KeyStyle

_SNAKE_CASE_PATTERN: Final[re.Pattern[str]] = re.compile(r"_([a-z])")


def camelize(name: str) -> str:
    """Camel-case an attribute name: ``created_at`` -> ``createdAt``, ``green?`` -> ``green``."""
    return _SNAKE_CASE_PATTERN.sub(lambda match: match.group(1).upper(), name).removesuffix("?")


def source_key_for(name: str, style: KeyStyle | str = KeyStyle.CAMEL) -> str:
    """Return the raw record key an attribute reads from under ``style``."""
    resolved = KeyStyle(style)
    if resolved is KeyStyle.IDENTITY:
        return name
    return camelize(name)


def humanize_list(
    items: Sequence[str],
    *,
    separator: str = ", ",
    conjunction: str = " and ",
) -> str:
    """Join items in natural language.

    ``["A"]`` -> ``"A"``, ``["A", "B"]`` -> ``"A and B"``,
    ``["A", "B", "C"]`` -> ``"A, B and C"``.
    """
    if not items:
        return ""
    *head, last = items
    if not head:
        return last
    return conjunction.join((separator.join(head), last))


__all__ = ["camelize", "humanize_list", "source_key_for"]
