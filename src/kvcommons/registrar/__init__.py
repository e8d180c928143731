"""Wrapper around the external assembly registration executable."""

from kvcommons.registrar.errors import (
    ArtifactNotFoundError,
    ExecutableNotFoundError,
    RegistrarError,
    RegistrarTimeoutError,
    RegistrarUsageError,
)
from kvcommons.registrar.runner import (
    ACTIONS,
    CommandResult,
    CommandRunner,
    Registrar,
    RegistrarSettings,
    SubprocessRunner,
    build_command,
    locate_executable,
    render_command_line,
)

__all__ = [
    "ACTIONS",
    "ArtifactNotFoundError",
    "CommandResult",
    "CommandRunner",
    "ExecutableNotFoundError",
    "Registrar",
    "RegistrarError",
    "RegistrarSettings",
    "RegistrarTimeoutError",
    "RegistrarUsageError",
    "SubprocessRunner",
    "build_command",
    "locate_executable",
    "render_command_line",
]
