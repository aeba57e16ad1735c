"""Unit tests for display strings and cycle-safe rendering."""

from __future__ import annotations

from datetime import date

from lazy_mapper import Model, is_, many, one
from lazy_mapper.core.rendering import is_rendering, render_instance


class Foo(Model):
    bar = one(object)
    label = one(str)


class Bar(Model):
    foo = one(Foo)


class Shelf(Model):
    name = one(str)
    opened = one(date)
    dusty = is_()
    tags = many(str)


def test_empty_instance_renders_only_the_class_name() -> None:
    assert repr(Shelf.from_record({"name": "top"})) == "<Shelf >"


def test_rendering_lists_only_materialized_non_none_values_in_declaration_order() -> None:
    shelf = Shelf.from_record({"name": "top", "opened": None, "tags": ["a"], "dusty": 1})

    assert shelf.tags == ["a"]
    assert shelf.opened is None
    assert shelf.name == "top"

    assert shelf.to_display_string() == "<Shelf name: 'top', tags: ['a'] >"
    assert shelf.materialized() == ("tags", "opened", "name")


def test_rendering_does_not_materialize_anything() -> None:
    shelf = Shelf.from_record({"name": "top", "dusty": True})

    repr(shelf)
    str(shelf)

    assert shelf.materialized() == ()


def test_false_flags_are_shown() -> None:
    shelf = Shelf(dusty=False)

    assert repr(shelf) == "<Shelf dusty: False >"


def test_cyclic_graph_renders_with_a_placeholder() -> None:
    foo = Foo()
    bar = Bar(foo=foo)
    foo.bar = bar

    assert repr(foo) == "<Foo bar: <Bar foo: <Foo ... > > >"
    assert repr(bar) == "<Bar foo: <Foo bar: <Bar ... > > >"


def test_self_reference_renders_with_a_placeholder() -> None:
    foo = Foo(label="me")
    foo.bar = foo

    assert repr(foo) == "<Foo bar: <Foo ... >, label: 'me' >"


def test_same_instance_twice_without_cycle_renders_fully() -> None:
    leaf = Foo(label="leaf")
    pair = Foo(bar=[leaf, leaf])

    assert repr(pair) == "<Foo bar: [<Foo label: 'leaf' >, <Foo label: 'leaf' >] >"


def test_render_guard_is_released_after_rendering() -> None:
    foo = Foo(label="x")
    seen: list[bool] = []

    def items() -> list[tuple[str, object]]:
        seen.append(is_rendering(foo))
        return [("label", "x")]

    assert render_instance(foo, items) == "<Foo label: 'x' >"
    assert seen == [True]
    assert not is_rendering(foo)
