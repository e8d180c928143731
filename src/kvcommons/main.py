"""Process boundary for the ``kvcommons`` command: exceptions in, exit codes out."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Exit codes of the ``kvcommons`` process.

    ``register``/``unregister`` return the registration executable's own exit code,
    so any value in ``0..255`` can come back from those two commands.
    """

    SUCCESS = 0
    COMMAND_FAILED = 1
    CONFIG_ERROR = 2
    INPUT_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and convert whatever happens into a process exit code."""

    from kvcommons.observability import shutdown_logging

    try:
        from kvcommons.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:  # pragma: no cover - argparse --help exits directly.
        return _as_exit_code(exc.code)
    except BaseException as exc:  # noqa: BLE001 - every failure becomes an exit code here.
        code = exit_code_for(exc)
        _report(exc, code)
        return int(code)
    finally:
        shutdown_logging()


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map ``exc`` (or the first recognised exception in its chain) to an ``ExitCode``."""

    rules = _routing_rules()
    for item in _causes(exc):
        for types, code in rules:
            if isinstance(item, types):
                return code
    return ExitCode.INTERNAL_ERROR


def _routing_rules() -> tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...]:
    from kvcommons.codec.errors import CodecError
    from kvcommons.config import ConfigLoadError, ConfigValidationError
    from kvcommons.registrar.errors import (
        ArtifactNotFoundError,
        ExecutableNotFoundError,
        RegistrarError,
        RegistrarUsageError,
    )

    # First match wins, so specific types come before their bases.
    return (
        ((CodecError,), ExitCode.INPUT_ERROR),
        (
            (
                ConfigLoadError,
                ConfigValidationError,
                RegistrarUsageError,
                ArtifactNotFoundError,
                ExecutableNotFoundError,
            ),
            ExitCode.CONFIG_ERROR,
        ),
        ((RegistrarError,), ExitCode.COMMAND_FAILED),
        ((FileNotFoundError, NotADirectoryError, PermissionError, ValueError), ExitCode.CONFIG_ERROR),
        ((OSError,), ExitCode.COMMAND_FAILED),
    )


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def _as_exit_code(raw: object) -> int:
    if raw is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw, int) and 0 <= raw <= 255:
        return raw
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _report(exc: BaseException, code: ExitCode) -> None:
    if code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(exc, file=sys.stderr)
    else:
        print(str(exc).strip() or type(exc).__name__, file=sys.stderr)


__all__ = ["ExitCode", "cli_entrypoint", "exit_code_for"]
