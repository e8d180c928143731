"""
kvcommons - configuration schema and validation.

File: src/kvcommons/config/schema.py

Purpose
- Declare the three config sections, their defaults, and one checker per field.

Functional requirements
- ``validate_config`` reports every problem as ``section.field: message``; nothing
  stops at the first issue.
- Unknown sections or fields and missing ones are reported, never ignored.
- ``merge_config`` overlays section by section; it is the only layering primitive.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, TypedDict

from kvcommons.constants import (
    DEFAULT_ENTRY_NAME,
    DEFAULT_REGISTER_ARGS,
    DEFAULT_ROOT_ELEMENT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_UNREGISTER_ARGS,
    LOG_LEVELS,
)

_ELEMENT_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9._-]*$")

# Fields holding filesystem paths, resolved against the config file directory.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("registrar", "executable"),
    ("logging", "file"),
)


class RegistrarConfig(TypedDict):
    executable: str
    timeout_seconds: float
    register_args: list[str]
    unregister_args: list[str]


class LoggingSettings(TypedDict):
    level: str
    file: str


class CodecConfig(TypedDict):
    root_element: str
    entry_name: str


class KvCommonsConfig(TypedDict):
    registrar: RegistrarConfig
    logging: LoggingSettings
    codec: CodecConfig


DEFAULT_CONFIG: Final[KvCommonsConfig] = {
    "registrar": {
        "executable": "",
        "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
        "register_args": list(DEFAULT_REGISTER_ARGS),
        "unregister_args": list(DEFAULT_UNREGISTER_ARGS),
    },
    "logging": {
        "level": "WARNING",
        "file": "",
    },
    "codec": {
        "root_element": DEFAULT_ROOT_ELEMENT,
        "entry_name": DEFAULT_ENTRY_NAME,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """One field that failed validation."""

    path: str
    message: str


class ConfigValidationError(ValueError):
    """Raised by ``assert_valid_config``; ``issues`` lists every problem found."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in self.issues]
        super().__init__("invalid config:\n" + "\n".join(lines))


# A checker returns an error message, or None when the value is acceptable.
_Checker = Callable[[object], "str | None"]


def _type_name(value: object) -> str:
    return type(value).__name__


def _check_text(value: object) -> str | None:
    if not isinstance(value, str):
        return f"expected string, got {_type_name(value)}"
    return None


def _check_executable(value: object) -> str | None:
    problem = _check_text(value)
    if problem is None and "\x00" in value:  # type: ignore[operator]
        return "must not contain NUL bytes"
    return problem


def _check_seconds(value: object) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return f"expected number, got {_type_name(value)}"
    if not math.isfinite(value):
        return "must be finite"
    if value <= 0:
        return "must be > 0"
    return None


def _check_args(value: object) -> str | None:
    if not isinstance(value, list):
        return f"expected array of strings, got {_type_name(value)}"
    for index, item in enumerate(value):
        if not isinstance(item, str):
            return f"item {index}: expected string, got {_type_name(item)}"
    return None


def _check_level(value: object) -> str | None:
    problem = _check_text(value)
    if problem is None and value.upper() not in LOG_LEVELS:  # type: ignore[union-attr]
        return f"invalid value {value!r}; expected one of: {', '.join(LOG_LEVELS)}"
    return problem


def _check_element_name(value: object) -> str | None:
    problem = _check_text(value)
    if problem is None and not _ELEMENT_NAME_PATTERN.fullmatch(value):  # type: ignore[arg-type]
        return f"{value!r} is not a valid XML element name"
    return problem


SCHEMA: Final[Mapping[str, Mapping[str, _Checker]]] = {
    "registrar": {
        "executable": _check_executable,
        "timeout_seconds": _check_seconds,
        "register_args": _check_args,
        "unregister_args": _check_args,
    },
    "logging": {
        "level": _check_level,
        "file": _check_text,
    },
    "codec": {
        "root_element": _check_element_name,
        "entry_name": _check_element_name,
    },
}


def default_config() -> KvCommonsConfig:
    """Return a fresh copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Return ``base`` with ``overlay`` applied; sections merge field by field."""

    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for section, values in overlay.items():
        current = merged.get(section)
        if isinstance(values, Mapping) and isinstance(current, dict):
            current.update(copy.deepcopy(dict(values)))
        else:
            merged[section] = copy.deepcopy(values)
    return merged


def validate_config(config: object) -> tuple[ConfigValidationIssue, ...]:
    """Return every validation issue found in ``config`` (empty when valid)."""

    if not isinstance(config, Mapping):
        return (ConfigValidationIssue("<root>", f"expected table, got {_type_name(config)}"),)

    issues: list[ConfigValidationIssue] = []
    for section in sorted(set(config) - set(SCHEMA), key=str):
        issues.append(ConfigValidationIssue(str(section), "unknown section"))

    for section, checkers in SCHEMA.items():
        values = config.get(section)
        if values is None:
            issues.append(ConfigValidationIssue(section, "missing required section"))
            continue
        if not isinstance(values, Mapping):
            issues.append(ConfigValidationIssue(section, f"expected table, got {_type_name(values)}"))
            continue
        for field in sorted(set(values) - set(checkers), key=str):
            issues.append(ConfigValidationIssue(f"{section}.{field}", "unknown field"))
        for field, check in checkers.items():
            if field not in values:
                issues.append(ConfigValidationIssue(f"{section}.{field}", "missing required field"))
                continue
            problem = check(values[field])
            if problem is not None:
                issues.append(ConfigValidationIssue(f"{section}.{field}", problem))
    return tuple(issues)


def assert_valid_config(config: Mapping[str, object]) -> dict[str, Any]:
    """Return a private copy of ``config``; raise ``ConfigValidationError`` if invalid."""

    issues = validate_config(config)
    if issues:
        raise ConfigValidationError(issues)
    return copy.deepcopy(dict(config))


__all__ = [
    "DEFAULT_CONFIG",
    "PATH_FIELDS",
    "SCHEMA",
    "CodecConfig",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "KvCommonsConfig",
    "LoggingSettings",
    "RegistrarConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
