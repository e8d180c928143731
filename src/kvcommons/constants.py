"""Stable constants shared across kvcommons modules."""

from __future__ import annotations

from typing import Final

# Wire format defaults.
DEFAULT_ROOT_ELEMENT: Final[str] = "dictionary"
DEFAULT_ENTRY_NAME: Final[str] = "KeyValue"

# Registration executable.
REGISTRAR_EXECUTABLE_NAMES: Final[tuple[str, ...]] = ("RegAsm.exe", "regasm")
DEFAULT_REGISTER_ARGS: Final[tuple[str, ...]] = ("/nologo", "/tlb", "/codebase")
DEFAULT_UNREGISTER_ARGS: Final[tuple[str, ...]] = ("/nologo", "/u")
DEFAULT_TIMEOUT_SECONDS: Final[float] = 120.0

# Config.
DEFAULT_CONFIG_FILE: Final[str] = "kvcommons.toml"
ENV_PREFIX: Final[str] = "KVCOMMONS_"
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_ENTRY_NAME",
    "DEFAULT_REGISTER_ARGS",
    "DEFAULT_ROOT_ELEMENT",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_UNREGISTER_ARGS",
    "ENV_PREFIX",
    "LOG_LEVELS",
    "REGISTRAR_EXECUTABLE_NAMES",
]
