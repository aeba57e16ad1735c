"""
lazy-mapper — unit tests for observability logging

File: tests/unit/observability/test_logging.py

Purpose
- Validate the opt-in JSON-lines handler and the materialization events models emit.

What this test file should cover
- JSON line validity and extra field normalization.
- Materialization and missing-mapper debug events.
- Handler replacement and shutdown.
"""

from __future__ import annotations

import io
import json
import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from lazy_mapper import MissingMapperError, Model, one
from lazy_mapper.config import MapperConfig
from lazy_mapper.observability import (
    DEFAULT_LOGGER_NAME,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()
    logging.getLogger(DEFAULT_LOGGER_NAME).setLevel(logging.NOTSET)


_MODEL_LOGGER = "lazy_mapper.core.model"


def _logger_name() -> str:
    return f"{DEFAULT_LOGGER_NAME}.tests.logging.{uuid4().hex}"


def _read_json_lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class Unmapped:
    pass


def test_json_lines_carry_normalized_extra_fields() -> None:
    stream = io.StringIO()
    logger_name = _logger_name()
    logger = setup_logging(LoggingConfig(logger_name=logger_name, level="INFO"), stream=stream)

    logger.info(
        "hello %s",
        "world",
        extra={"when": date(2020, 1, 2), "amount": Decimal("1.50"), "kind": int, "tags": ("a",)},
    )
    logger.debug("filtered out")
    shutdown_logging()

    parsed = _read_json_lines(stream)
    assert len(parsed) == 1
    event = parsed[0]
    assert event["level"] == "INFO"
    assert event["logger"] == logger_name
    assert event["message"] == "hello world"
    assert str(event["timestamp"]).endswith("Z")
    assert event["fields"] == {
        "when": "2020-01-02",
        "amount": "1.50",
        "kind": "int",
        "tags": ["a"],
    }


def test_exceptions_are_rendered_into_the_event() -> None:
    stream = io.StringIO()
    logger = setup_logging(LoggingConfig(logger_name=_logger_name()), stream=stream)

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception("failed")
    shutdown_logging()

    event = _read_json_lines(stream)[0]
    assert event["level"] == "ERROR"
    assert "ValueError: boom" in str(event["exception"])


def test_materialization_emits_debug_events() -> None:
    class Traced(Model):
        created_on = one(date)
        blob = one(Unmapped)

    stream = io.StringIO()
    setup_logging(MapperConfig(log_level="debug"), stream=stream)

    instance = Traced.from_record({"createdOn": "2020-01-02", "blob": "x"})
    assert instance.created_on == date(2020, 1, 2)
    with pytest.raises(MissingMapperError):
        _ = instance.blob
    shutdown_logging()

    events = [item for item in _read_json_lines(stream) if item["logger"] == _MODEL_LOGGER]
    fields = [item["fields"] for item in events]

    assert {
        "model": "Traced",
        "attribute": "created_on",
        "source_key": "createdOn",
        "path": "coerced",
    } in fields
    assert {"model": "Traced", "attribute": "blob", "type_key": "Unmapped"} in fields


def test_plain_text_output_when_json_is_disabled() -> None:
    stream = io.StringIO()
    logger = setup_logging(
        LoggingConfig(logger_name=_logger_name(), level=logging.INFO, json_lines=False),
        stream=stream,
    )

    logger.info("plain message")
    shutdown_logging()

    line = stream.getvalue().strip()
    assert line.endswith("plain message")
    assert " INFO " in line


def test_setup_replaces_the_previous_handler() -> None:
    logger_name = _logger_name()
    first = io.StringIO()
    second = io.StringIO()

    logger = setup_logging(LoggingConfig(logger_name=logger_name, level="INFO"), stream=first)
    setup_logging(LoggingConfig(logger_name=logger_name, level="INFO"), stream=second)
    logger.info("only once")
    shutdown_logging()

    assert first.getvalue() == ""
    assert len(_read_json_lines(second)) == 1
    assert logger.handlers == []


def test_shutdown_without_setup_is_a_no_op() -> None:
    shutdown_logging()
    shutdown_logging()


@pytest.mark.parametrize("level", ["LOUD", 3.5])
def test_invalid_levels_are_rejected(level: object) -> None:
    with pytest.raises(ValueError):
        config = LoggingConfig(logger_name=_logger_name(), level=level)  # type: ignore[arg-type]
        setup_logging(config)


def test_get_logger_scopes_names_under_the_library() -> None:
    assert get_logger().name == DEFAULT_LOGGER_NAME
    assert get_logger("core").name == "lazy_mapper.core"
    assert get_logger("lazy_mapper.config").name == "lazy_mapper.config"
