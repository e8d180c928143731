"""Layered configuration: defaults, ``kvcommons.toml``, ``KVCOMMONS_*`` env vars, CLI flags."""

from kvcommons.config.loader import ConfigLoadError, dump_effective_config, env_var_name, load_config
from kvcommons.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    KvCommonsConfig,
    default_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "KvCommonsConfig",
    "default_config",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "validate_config",
]
