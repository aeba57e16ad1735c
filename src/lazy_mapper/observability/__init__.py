"""Public observability primitives: logging setup for the ``lazy_mapper`` logger."""

from lazy_mapper.observability.logging import (
    DEFAULT_LOGGER_NAME,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "DEFAULT_LOGGER_NAME",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
