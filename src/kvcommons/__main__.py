"""Module entrypoint for ``python -m kvcommons``."""

from __future__ import annotations

from kvcommons.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
