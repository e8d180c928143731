"""
kvcommons - registration executable wrapper.

File: src/kvcommons/registrar/runner.py

Purpose
- Locate the registration executable and run it to register or unregister an artifact.

Functional requirements
- ``register`` passes ``<artifact> /nologo /tlb /codebase``; ``unregister`` passes
  ``<artifact> /nologo /u`` (both argument tails are configurable).
- The artifact must exist before anything is spawned.
- The child's stdout/stderr are relayed line by line while it runs; its exit code is returned.
- Subprocess execution goes through an injectable runner for offline testing.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Final, Literal, Protocol

from kvcommons.constants import (
    DEFAULT_REGISTER_ARGS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_UNREGISTER_ARGS,
    REGISTRAR_EXECUTABLE_NAMES,
)
from kvcommons.extensions.ranges import match_any
from kvcommons.extensions.strings import escape_for_command_line, is_null_or_whitespace
from kvcommons.registrar.errors import (
    ArtifactNotFoundError,
    ExecutableNotFoundError,
    RegistrarTimeoutError,
    RegistrarUsageError,
)
from kvcommons.utils.fs import resolve_executable

RegistrarAction = Literal["register", "unregister"]

ACTIONS: Final[tuple[str, ...]] = ("register", "unregister")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized subprocess execution result."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    """Injectable command runner used for deterministic/offline testing.

    Implementations forward child output to ``stdout``/``stderr`` as it arrives and
    also return it in the result.
    """

    def run(
        self,
        command: Sequence[str],
        *,
        timeout_seconds: float | None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> CommandResult: ...


class SubprocessRunner:
    """Default command runner backed by ``subprocess.Popen``.

    One pump thread per pipe copies lines to the caller's streams while the child
    is still running, so long registrations report progress as they go.
    """

    def run(
        self,
        command: Sequence[str],
        *,
        timeout_seconds: float | None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> CommandResult:
        process = subprocess.Popen(
            list(command),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        out_lines: list[str] = []
        err_lines: list[str] = []
        pumps = [
            threading.Thread(target=_pump, args=(process.stdout, stdout, out_lines), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, stderr, err_lines), daemon=True),
        ]
        for pump in pumps:
            pump.start()

        try:
            returncode = process.wait(timeout=timeout_seconds)
        except subprocess.TimeoutExpired as exc:
            process.kill()
            process.wait()
            raise RegistrarTimeoutError(command, timeout_seconds or 0.0) from exc
        finally:
            for pump in pumps:
                pump.join()

        return CommandResult(
            command=tuple(command),
            returncode=returncode,
            stdout="".join(out_lines),
            stderr="".join(err_lines),
        )


def _pump(pipe: IO[str] | None, sink: IO[str] | None, collected: list[str]) -> None:
    if pipe is None:
        return
    with pipe:
        for line in pipe:
            collected.append(line)
            if sink is not None:
                sink.write(line)
                sink.flush()


@dataclass(frozen=True, slots=True)
class RegistrarSettings:
    """Resolved ``[registrar]`` configuration."""

    executable: str = ""
    timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS
    register_args: tuple[str, ...] = field(default=DEFAULT_REGISTER_ARGS)
    unregister_args: tuple[str, ...] = field(default=DEFAULT_UNREGISTER_ARGS)

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        object.__setattr__(self, "register_args", tuple(self.register_args))
        object.__setattr__(self, "unregister_args", tuple(self.unregister_args))

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> RegistrarSettings:
        """Build settings from an effective config mapping (``load_config`` output)."""

        section = config.get("registrar", {})
        if not isinstance(section, Mapping):
            raise ValueError("registrar config section must be a mapping")
        timeout = section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        return cls(
            executable=str(section.get("executable", "")),
            timeout_seconds=float(timeout) if timeout is not None else None,  # type: ignore[arg-type]
            register_args=tuple(section.get("register_args", DEFAULT_REGISTER_ARGS)),  # type: ignore[arg-type]
            unregister_args=tuple(section.get("unregister_args", DEFAULT_UNREGISTER_ARGS)),  # type: ignore[arg-type]
        )

    def args_for(self, action: str) -> tuple[str, ...]:
        if action == "register":
            return self.register_args
        if action == "unregister":
            return self.unregister_args
        raise RegistrarUsageError(f"unsupported action {action!r}; expected one of: {', '.join(ACTIONS)}")


def locate_executable(
    configured: str = "",
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> Path:
    """Resolve the registration executable.

    An explicitly configured path wins and must exist. Otherwise the well-known
    executable names are looked up on ``PATH``.
    """

    if not is_null_or_whitespace(configured):
        explicit = resolve_executable(configured.strip())
        if explicit is not None:
            return explicit
        found = which(configured.strip())
        if found is not None:
            return Path(found)
        raise ExecutableNotFoundError([configured.strip()])

    for name in REGISTRAR_EXECUTABLE_NAMES:
        found = which(name)
        if found is not None:
            return Path(found)
    raise ExecutableNotFoundError(REGISTRAR_EXECUTABLE_NAMES)


def build_command(
    action: str,
    artifact: str | Path,
    executable: str | Path,
    settings: RegistrarSettings,
) -> tuple[str, ...]:
    """Return the argv used to run ``action`` against ``artifact``."""

    if not match_any(action, *ACTIONS):
        raise RegistrarUsageError(f"unsupported action {action!r}; expected one of: {', '.join(ACTIONS)}")
    return (str(executable), str(artifact), *settings.args_for(action))


def render_command_line(command: Sequence[str]) -> str:
    """Render ``command`` as a single command line, quoting where needed."""

    rendered: list[str] = []
    for part in command:
        if part and not any(ch in part for ch in ' \t"'):
            rendered.append(part)
        else:
            rendered.append(escape_for_command_line(part))
    return " ".join(rendered)


class Registrar:
    """Registers and unregisters artifacts through the registration executable."""

    def __init__(
        self,
        settings: RegistrarSettings | None = None,
        *,
        runner: CommandRunner | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._settings = settings if settings is not None else RegistrarSettings()
        self._runner: CommandRunner = runner if runner is not None else SubprocessRunner()
        self._which = which

    @property
    def settings(self) -> RegistrarSettings:
        return self._settings

    def run(
        self,
        action: str,
        artifact: str | Path,
        *,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> int:
        """Run ``action`` for ``artifact``, relay the child's output, return its exit code."""

        if not match_any(action, *ACTIONS):
            raise RegistrarUsageError(f"unsupported action {action!r}; expected one of: {', '.join(ACTIONS)}")

        artifact_text = str(artifact)
        if is_null_or_whitespace(artifact_text):
            raise RegistrarUsageError("an artifact path is required")
        if not Path(artifact_text).is_file():
            raise ArtifactNotFoundError(artifact_text)

        executable = locate_executable(self._settings.executable, which=self._which)
        command = build_command(action, artifact_text, executable, self._settings)
        logger.info(
            "running registration executable",
            extra={"action": action, "command_line": render_command_line(command)},
        )

        result = self._runner.run(
            command,
            timeout_seconds=self._settings.timeout_seconds,
            stdout=sys.stdout if stdout is None else stdout,
            stderr=sys.stderr if stderr is None else stderr,
        )

        log = logger.info if result.returncode == 0 else logger.warning
        log(
            "registration executable finished",
            extra={"action": action, "returncode": result.returncode},
        )
        return result.returncode

    def register(self, artifact: str | Path, **streams: IO[str] | None) -> int:
        return self.run("register", artifact, **streams)  # type: ignore[arg-type]

    def unregister(self, artifact: str | Path, **streams: IO[str] | None) -> int:
        return self.run("unregister", artifact, **streams)  # type: ignore[arg-type]


__all__ = [
    "ACTIONS",
    "CommandResult",
    "CommandRunner",
    "Registrar",
    "RegistrarAction",
    "RegistrarSettings",
    "SubprocessRunner",
    "build_command",
    "locate_executable",
    "render_command_line",
]
