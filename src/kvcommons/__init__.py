"""
kvcommons - package root

File: src/kvcommons/__init__.py

Purpose
- Package root. Exposes the mapping container and the XML entry codec.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).

Key interfaces / contracts
- ``EntryMap`` for ordinary use, ``dump``/``load`` for persistence.
"""

from __future__ import annotations

from kvcommons.codec import (
    DEFAULT_ENTRY_TYPE,
    CodecError,
    EntryType,
    MalformedEntryError,
    MalformedInputError,
    TruncatedStreamError,
    dump,
    dumps,
    load,
    loads,
    open_map,
    save,
)
from kvcommons.collections import ABSENT, EntryMap

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "DEFAULT_ENTRY_TYPE",
    "CodecError",
    "EntryMap",
    "EntryType",
    "MalformedEntryError",
    "MalformedInputError",
    "TruncatedStreamError",
    "__version__",
    "dump",
    "dumps",
    "load",
    "loads",
    "open_map",
    "save",
]
