"""Opt-in logging setup for the ``lazy_mapper`` logger hierarchy with JSON-lines output."""

from __future__ import annotations

import json
import logging
import math
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import IO, Final

from lazy_mapper.config.active import get_active_config
from lazy_mapper.config.schema import MapperConfig

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

DEFAULT_LOGGER_NAME: Final[str] = "lazy_mapper"
_PLAIN_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

_ACTIVE_HANDLER_LOCK = threading.Lock()
_ACTIVE_HANDLER: logging.Handler | None = None
_ACTIVE_LOGGER_NAME: str | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for the stream handler installed by :func:`setup_logging`."""

    logger_name: str = DEFAULT_LOGGER_NAME
    level: int | str = "WARNING"
    json_lines: bool = True

    @classmethod
    def from_mapper_config(cls, config: MapperConfig) -> LoggingConfig:
        return cls(level=config.log_level, json_lines=config.log_json)


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = extras

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            event["stack"] = str(record.stack_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def setup_logging(
    config: MapperConfig | LoggingConfig | None = None,
    *,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a single stream handler to the ``lazy_mapper`` logger and return it.

    Calling again replaces the handler installed by the previous call.
    """

    if config is None:
        config = get_active_config()
    logging_config = (
        config if isinstance(config, LoggingConfig) else LoggingConfig.from_mapper_config(config)
    )

    logger_name = _validate_logger_name(logging_config.logger_name)
    level = _parse_log_level(logging_config.level)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    if logging_config.json_lines:
        handler.setFormatter(_JsonLineFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))

    shutdown_logging()

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.addHandler(handler)

    global _ACTIVE_HANDLER, _ACTIVE_LOGGER_NAME
    with _ACTIVE_HANDLER_LOCK:
        _ACTIVE_HANDLER = handler
        _ACTIVE_LOGGER_NAME = logger_name
    return logger


def shutdown_logging() -> None:
    """Detach and close the handler installed by :func:`setup_logging`, if any."""
    global _ACTIVE_HANDLER, _ACTIVE_LOGGER_NAME
    with _ACTIVE_HANDLER_LOCK:
        handler = _ACTIVE_HANDLER
        logger_name = _ACTIVE_LOGGER_NAME
        _ACTIVE_HANDLER = None
        _ACTIVE_LOGGER_NAME = None

    if handler is None or logger_name is None:
        return
    logger = logging.getLogger(logger_name)
    logger.removeHandler(handler)
    handler.flush()
    handler.close()


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``lazy_mapper`` or one of its children."""
    if name is None or name == DEFAULT_LOGGER_NAME:
        return logging.getLogger(DEFAULT_LOGGER_NAME)
    if name.startswith(f"{DEFAULT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{DEFAULT_LOGGER_NAME}.{name}")


def _validate_logger_name(logger_name: str) -> str:
    if not isinstance(logger_name, str):
        raise ValueError(f"logger_name must be a string, got {type(logger_name).__name__}")
    normalized = logger_name.strip()
    if not normalized:
        raise ValueError("logger_name must not be empty")
    return normalized


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS:
            continue
        if key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, type):
        return value.__name__
    if isinstance(value, Mapping):
        output: dict[str, JSONValue] = {}
        for key, item in value.items():
            output[str(key)] = _normalize_json_value(item)
        return output
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        normalized_items = [_normalize_json_value(item) for item in value]
        return sorted(
            normalized_items,
            key=lambda item: json.dumps(
                item, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            ),
        )
    return repr(value)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JSONScalar",
    "JSONValue",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
