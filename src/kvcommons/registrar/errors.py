"""Error types raised while invoking the registration executable."""

from __future__ import annotations

from collections.abc import Sequence


class RegistrarError(RuntimeError):
    """Base class for registrar failures."""


class RegistrarUsageError(RegistrarError):
    """Raised when the requested action or its arguments are not understood."""


class ArtifactNotFoundError(RegistrarError):
    """Raised when the artifact to register or unregister does not exist."""

    def __init__(self, artifact: str) -> None:
        self.artifact = artifact
        super().__init__(f"artifact to process was not found: {artifact}")


class ExecutableNotFoundError(RegistrarError):
    """Raised when no registration executable can be located."""

    def __init__(self, searched: Sequence[str]) -> None:
        self.searched = tuple(searched)
        rendered = ", ".join(self.searched) if self.searched else "<nothing>"
        super().__init__(
            "registration executable was not found (searched: "
            f"{rendered}); set registrar.executable or KVCOMMONS_REGISTRAR_EXECUTABLE"
        )


class RegistrarTimeoutError(RegistrarError):
    """Raised when the registration executable exceeds its time limit."""

    def __init__(self, command: Sequence[str], timeout_seconds: float) -> None:
        self.command = tuple(command)
        self.timeout_seconds = timeout_seconds
        super().__init__(f"command timed out after {timeout_seconds} seconds: {' '.join(command)}")


__all__ = [
    "ArtifactNotFoundError",
    "ExecutableNotFoundError",
    "RegistrarError",
    "RegistrarTimeoutError",
    "RegistrarUsageError",
]
