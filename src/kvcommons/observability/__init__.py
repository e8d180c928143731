"""Logging setup for kvcommons command-line tools."""

from kvcommons.observability.logging import (
    DEFAULT_LOGGER_NAME,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = ["DEFAULT_LOGGER_NAME", "get_logger", "setup_logging", "shutdown_logging"]
