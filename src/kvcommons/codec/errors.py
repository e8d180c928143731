"""Codec exception taxonomy."""

from __future__ import annotations

__all__ = [
    "CodecError",
    "MalformedEntryError",
    "MalformedInputError",
    "TruncatedStreamError",
]


class CodecError(ValueError):
    """Base class for entry codec failures."""


class MalformedInputError(CodecError):
    """Raised when a serialized entry region cannot be read back.

    ``line`` and ``column`` are 1-based positions reported by the XML parser when known.
    """

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" (line {line}" + (f", column {column})" if column is not None else ")")
        super().__init__(f"{message}{location}")


class TruncatedStreamError(MalformedInputError):
    """Raised when input ends before the region's closing marker."""


class MalformedEntryError(MalformedInputError):
    """Raised when a block does not match the declared entry shape or fails to decode."""
