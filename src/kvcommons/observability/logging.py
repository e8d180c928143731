"""
kvcommons - JSON-lines logging.

File: src/kvcommons/observability/logging.py

Purpose
- One JSON object per log record, on stderr and optionally appended to a file.

Functional requirements
- Each line carries ``timestamp`` (UTC, millisecond ``Z`` form), ``level``, ``logger``
  and ``message``; ``extra=`` values land under ``fields``; tracebacks under
  ``exception``. Keys are sorted so lines diff cleanly.
- ``setup_logging`` may be called repeatedly; each call replaces the handlers of
  the previous one.
"""

from __future__ import annotations

import json
import logging
import math
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from typing import IO, Final

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

DEFAULT_LOGGER_NAME: Final[str] = "kvcommons"

# Attributes every LogRecord has; anything else on a record came from ``extra=``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JsonLinesFormatter(logging.Formatter):
    """Render a record as a single compact JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        line: dict[str, JSONValue] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = {
            key: _to_json(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if fields:
            line["fields"] = fields
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            line["stack"] = self.formatStack(record.stack_info)
        return json.dumps(line, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def setup_logging(
    *,
    level: int | str = "WARNING",
    log_file: Path | str | None = None,
    stream: IO[str] | None = None,
    logger_name: str = DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """Attach JSON-lines handlers to ``logger_name`` and return that logger.

    Records go to ``stream`` (stderr when omitted) and, if ``log_file`` is given, are
    appended to that file too; its parent directory is created on demand.
    """

    numeric_level = _level_number(level)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr if stream is None else stream)]
    if log_file is not None and str(log_file).strip():
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logger = logging.getLogger(logger_name)
    _detach_handlers(logger)
    logger.setLevel(numeric_level)
    logger.propagate = False
    formatter = JsonLinesFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        logger.addHandler(handler)
    return logger


def shutdown_logging(logger_name: str = DEFAULT_LOGGER_NAME) -> None:
    """Detach and close the handlers installed by :func:`setup_logging`."""

    _detach_handlers(logging.getLogger(logger_name))


def get_logger(name: str) -> logging.Logger:
    """Return ``name`` as a logger under the ``kvcommons`` namespace."""

    if name == DEFAULT_LOGGER_NAME or name.startswith(DEFAULT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{DEFAULT_LOGGER_NAME}.{name}")


def _detach_handlers(logger: logging.Logger) -> None:
    # StreamHandler flushes on every emit and FileHandler.close flushes itself;
    # the stream behind a StreamHandler may already be closed by its owner.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        known = logging.getLevelNamesMapping()
        name = level.strip().upper()
        if name in known:
            return known[name]
    raise ValueError(f"unsupported logging level {level!r}")


def _to_json(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, (Decimal, Path)):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json(item) for item in value]
    return repr(value)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JSONScalar",
    "JSONValue",
    "JsonLinesFormatter",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
