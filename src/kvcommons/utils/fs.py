"""
kvcommons - filesystem utilities

File: src/kvcommons/utils/fs.py

Purpose
- Atomic replacement of serialized documents so readers never observe a partial write.

Functional requirements
- Writes go to a temp file in the destination directory and replace the target in
  a single ``os.replace`` step.
- The temp file is removed when any step fails; the original error propagates.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = ["atomic_write", "resolve_executable"]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``data`` in one step.

    The bytes are staged in a hidden sibling temp file and fsynced before the
    rename. The parent directory must already exist.
    """

    payload = data.encode(encoding) if isinstance(data, str) else data
    target = Path(path)
    directory = target.parent.resolve(strict=True)
    if not directory.is_dir():
        raise NotADirectoryError(f"{directory!s} is not a directory")

    fd, staged = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(staged, target)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(staged)
        raise
    _sync_directory(directory)


def resolve_executable(candidate: PathLike) -> Path | None:
    """Return ``candidate`` as an existing regular file path, or ``None``."""

    path = Path(candidate).expanduser()
    return path.resolve() if path.is_file() else None


def _sync_directory(directory: Path) -> None:
    # Persists the rename; Windows has no directory handles to fsync.
    if os.name == "nt":
        return
    flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
    with contextlib.suppress(OSError):
        dir_fd = os.open(directory, flags)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
