"""
kvcommons - runtime config loader.

File: src/kvcommons/config/loader.py

Purpose
- Build the effective ``[registrar]``/``[logging]``/``[codec]`` config from the
  built-in defaults, ``kvcommons.toml``, ``KVCOMMONS_*`` env vars and CLI overrides.

Functional requirements
- Later layers win: CLI > env > file > defaults.
- A missing default ``kvcommons.toml`` is not an error; a missing explicit path is.
- Only scalar fields can be set from the environment; argument lists come from the file.
- Relative ``registrar.executable`` and ``logging.file`` resolve against the config
  file's directory. Empty values mean "not configured" and stay empty.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Final

from kvcommons.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)
from kvcommons.constants import DEFAULT_CONFIG_FILE, ENV_PREFIX


# (section, field, parser) for every field that may be overridden from the environment.
ENV_FIELDS: Final[tuple[tuple[str, str, Callable[[str], object]], ...]] = (
    ("registrar", "executable", str),
    ("registrar", "timeout_seconds", float),
    ("logging", "level", str),
    ("logging", "file", str),
    ("codec", "root_element", str),
    ("codec", "entry_name", str),
)


class ConfigLoadError(ValueError):
    """Raised when config cannot be read or an override cannot be applied."""


def env_var_name(section: str, field: str) -> str:
    """``("registrar", "timeout_seconds")`` -> ``KVCOMMONS_REGISTRAR_TIMEOUT_SECONDS``."""

    return f"{ENV_PREFIX}{section.upper()}_{field.upper()}"


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    ``cli_overrides`` maps dotted ``section.field`` keys to values, for example
    ``{"logging.level": "DEBUG"}``.
    """

    path = _config_file(config_path)
    from_file = _read_toml(path, required=config_path is not None)
    config = assert_valid_config(merge_config(default_config(), from_file))

    config = merge_config(config, _env_layer(os.environ if environ is None else environ))
    config = merge_config(config, _cli_layer(cli_overrides or {}))
    config = assert_valid_config(config)

    _resolve_paths(config, path.parent)
    return config


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Render ``config`` as compact JSON with sorted keys."""

    return json.dumps(dict(config), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _config_file(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_layer(environ: Mapping[str, str]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for section, field, parse in ENV_FIELDS:
        name = env_var_name(section, field)
        raw = environ.get(name)
        if raw is None:
            continue
        try:
            value = parse(raw.strip())
        except ValueError as exc:
            raise ConfigLoadError(f"{name} -> {section}.{field}: cannot parse {raw!r}") from exc
        layer.setdefault(section, {})[field] = value
    return layer


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for key, value in overrides.items():
        section, dot, field = key.partition(".")
        if not dot or not section or not field or "." in field:
            raise ConfigLoadError(f"invalid CLI override key {key!r}; expected 'section.field'")
        layer.setdefault(section, {})[field] = value
    return layer


def _resolve_paths(config: dict[str, Any], base_dir: Path) -> None:
    for section, field in PATH_FIELDS:
        raw = config[section][field].strip()
        if not raw:
            continue
        candidate = Path(os.path.expandvars(raw)).expanduser()
        if not candidate.is_absolute():
            candidate = base_dir / candidate
        config[section][field] = Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ENV_FIELDS",
    "ConfigLoadError",
    "dump_effective_config",
    "env_var_name",
    "load_config",
]
