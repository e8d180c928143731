"""Filesystem helpers shared by the codec and the registrar."""

from kvcommons.utils.fs import atomic_write, resolve_executable

__all__ = ["atomic_write", "resolve_executable"]
