"""Unit tests for source-key naming and natural-language list joining."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from lazy_mapper.config.schema import KeyStyle
from lazy_mapper.core.naming import camelize, humanize_list, source_key_for

_WORDS = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=8)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("created_at", "createdAt"),
        ("foo", "foo"),
        ("is_green?", "isGreen"),
        ("a_b_c", "aBC"),
        ("version_2", "version_2"),
        ("what?", "what"),
    ],
)
def test_camelize(name: str, expected: str) -> None:
    assert camelize(name) == expected


def test_source_key_for_identity_style_keeps_the_name() -> None:
    assert source_key_for("created_at", KeyStyle.IDENTITY) == "created_at"
    assert source_key_for("created_at", "camel") == "createdAt"


@given(words=st.lists(_WORDS, min_size=1, max_size=5))
@settings(max_examples=60, deadline=None)
def test_camelize_removes_separators_and_preserves_letters(words: list[str]) -> None:
    name = "_".join(words)
    result = camelize(name)

    assert "_" not in result
    assert result.lower() == "".join(words)
    assert result[0] == words[0][0]


@pytest.mark.parametrize(
    ("items", "expected"),
    [
        ([], ""),
        (["A"], "A"),
        (["A", "B"], "A and B"),
        (["A", "B", "C"], "A, B and C"),
        (["int", "str", "float", "NoneType"], "int, str, float and NoneType"),
    ],
)
def test_humanize_list(items: list[str], expected: str) -> None:
    assert humanize_list(items) == expected


def test_humanize_list_custom_conjunction() -> None:
    assert humanize_list(["A", "B", "C"], conjunction=" or ") == "A, B or C"


@given(items=st.lists(_WORDS, min_size=2, max_size=6))
@settings(max_examples=60, deadline=None)
def test_humanize_list_joins_all_but_last_with_commas(items: list[str]) -> None:
    result = humanize_list(items)

    assert result == f"{', '.join(items[:-1])} and {items[-1]}"
    assert result.count(" and ") == 1
    assert result.count(", ") == len(items) - 2
