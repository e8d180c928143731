"""Command-line interface router for kvcommons."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import IO, Any, Final, NoReturn

import yaml

from kvcommons.codec import EntryType, codec_by_name, open_map
from kvcommons.codec.scalars import BUILTIN_CODECS
from kvcommons.config import dump_effective_config, load_config
from kvcommons.observability import get_logger, setup_logging
from kvcommons.registrar import ACTIONS, Registrar, RegistrarSettings

PROG: Final[str] = "kvcommons"
LEGACY_ACTION_FLAGS: Final[Mapping[str, str]] = {f"--{action}": action for action in ACTIONS}

# Kept in step with ``kvcommons.main.ExitCode``.
_EXIT_CONFIG_ERROR: Final[int] = 2
_EXIT_INPUT_ERROR: Final[int] = 3

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = _EXIT_CONFIG_ERROR

    def __str__(self) -> str:
        return self.message


class CLIUsageError(CLIError):
    """Raised by the parser instead of exiting on malformed arguments."""


class _UsageParser(argparse.ArgumentParser):
    """Argument parser that prints usage on stdout and raises instead of exiting."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stdout)
        raise CLIUsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with all subcommands."""

    parser = _UsageParser(
        prog=PROG,
        description=(
            "Element-per-entry XML map tooling and a wrapper around the assembly "
            "registration executable."
        ),
        epilog=(
            "Legacy form:\n"
            f"  {PROG} --register <artifact>\n"
            f"  {PROG} --unregister <artifact>\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    common = _UsageParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to kvcommons TOML config (default: ./kvcommons.toml if present).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help="Override logging.level for this invocation.",
    )

    subparsers = parser.add_subparsers(dest="command")

    register_parser = subparsers.add_parser(
        "register",
        parents=[common],
        help="Register an assembly",
        description="Run the registration executable with '<artifact> /nologo /tlb /codebase'.",
    )
    register_parser.add_argument("artifact", help="Path to the assembly to register")
    register_parser.set_defaults(handler=_cmd_registrar, action="register")

    unregister_parser = subparsers.add_parser(
        "unregister",
        parents=[common],
        help="Unregister an assembly",
        description="Run the registration executable with '<artifact> /nologo /u'.",
    )
    unregister_parser.add_argument("artifact", help="Path to the assembly to unregister")
    unregister_parser.set_defaults(handler=_cmd_registrar, action="unregister")

    inspect_parser = subparsers.add_parser(
        "inspect",
        parents=[common],
        help="Print a serialized map as YAML",
        description=(
            "Load an element-per-entry XML document and print its entries as YAML.\n\n"
            "Examples:\n"
            f"  {PROG} inspect settings.xml\n"
            f"  {PROG} inspect counts.xml --value-type int\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    type_names = sorted(BUILTIN_CODECS)
    inspect_parser.add_argument("file", help="Path to the XML document")
    inspect_parser.add_argument("--root", default=None, help="Root element name (default: from config)")
    inspect_parser.add_argument(
        "--entry-name", default=None, help="Entry block element name (default: from config)"
    )
    inspect_parser.add_argument("--key-type", default="string", choices=type_names)
    inspect_parser.add_argument("--value-type", default="string", choices=type_names)
    inspect_parser.set_defaults(handler=_cmd_inspect)

    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration as JSON",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def normalize_argv(argv: Sequence[str]) -> list[str]:
    """Rewrite the legacy ``--register <artifact>`` form into subcommand form."""

    args = list(argv)
    if args and args[0] in LEGACY_ACTION_FLAGS:
        return [LEGACY_ACTION_FLAGS[args[0]], *args[1:]]
    return args


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    raw_args = list(argv) if argv is not None else sys.argv[1:]
    try:
        namespace = parser.parse_args(normalize_argv(raw_args))
    except CLIUsageError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stdout)
        return _EXIT_CONFIG_ERROR

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {}
    if args.log_level:
        overrides["logging.level"] = args.log_level
    config = load_config(args.config_path, cli_overrides=overrides)

    log_settings = config["logging"]
    setup_logging(level=log_settings["level"], log_file=log_settings["file"] or None)
    return config


def _cmd_registrar(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    registrar = Registrar(RegistrarSettings.from_config(config))
    logger.debug("dispatching registrar action", extra={"action": args.action})
    return registrar.run(args.action, args.artifact)


def _cmd_inspect(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    codec_settings = config["codec"]

    path = Path(args.file)
    if not path.is_file():
        raise CLIError(f"input file not found: {path}", exit_code=_EXIT_INPUT_ERROR)

    entry_type = EntryType(
        codec_by_name(args.key_type),
        codec_by_name(args.value_type),
        name=args.entry_name or codec_settings["entry_name"],
    )
    loaded = open_map(path, root=args.root or codec_settings["root_element"], entry_type=entry_type)
    logger.info("loaded map", extra={"path": path, "entries": loaded.size()})

    payload = {_to_plain(key): _to_plain(value) for key, value in loaded.enumerate()}
    _emit_yaml(payload, sys.stdout)
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    sys.stdout.write(dump_effective_config(config) + "\n")
    return 0


def _emit_yaml(payload: object, stream: IO[str]) -> None:
    rendered = yaml.safe_dump(
        payload,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=120,
    )
    if not rendered.endswith("\n"):
        rendered = rendered + "\n"
    stream.write(rendered)


def _to_plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Decimal):
        return str(value)
    return value


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


__all__ = ["CLIError", "CLIUsageError", "build_parser", "main", "normalize_argv", "run_cli"]
