"""Whole-document helpers: a root region element wrapping the entry blocks."""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import IO, TypeVar

from kvcommons.codec.entries import read_entries, write_entries
from kvcommons.codec.entry_types import DEFAULT_ENTRY_TYPE, EntryType, validate_element_name
from kvcommons.codec.stream import DEFAULT_CHUNK_SIZE, DEFAULT_INDENT, EntryStreamReader, EntryStreamWriter
from kvcommons.collections.mapping import EntryMap
from kvcommons.constants import DEFAULT_ROOT_ELEMENT
from kvcommons.utils.fs import atomic_write

K = TypeVar("K")
V = TypeVar("V")

PathLike = str | os.PathLike[str]

__all__ = [
    "DEFAULT_ROOT_ELEMENT",
    "dump",
    "dumps",
    "load",
    "loads",
    "open_map",
    "save",
]


def dump(
    mapping: EntryMap[K, V],
    fp: IO[str],
    *,
    root: str = DEFAULT_ROOT_ELEMENT,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    indent: str | None = DEFAULT_INDENT,
    encoding: str = "utf-8",
) -> int:
    """Write ``mapping`` as a standalone XML document; return the number of entries."""

    root_name = validate_element_name(root, "root")
    writer = EntryStreamWriter(fp, encoding=encoding, indent=indent)
    writer.start_document()
    writer.start_element(root_name)
    written = write_entries(mapping, writer, entry_type)
    writer.end_element(root_name)
    writer.end_document()
    return written


def dumps(
    mapping: EntryMap[K, V],
    *,
    root: str = DEFAULT_ROOT_ELEMENT,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    indent: str | None = DEFAULT_INDENT,
) -> str:
    buffer = io.StringIO()
    dump(mapping, buffer, root=root, entry_type=entry_type, indent=indent)
    return buffer.getvalue()


def load(
    fp: IO[str] | IO[bytes],
    *,
    root: str = DEFAULT_ROOT_ELEMENT,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    target: EntryMap[K, V] | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> EntryMap[K, V]:
    """Read a document written by :func:`dump`.

    The root element must be named ``root``, and nothing but whitespace may follow it.
    """

    root_name = validate_element_name(root, "root")
    reader = EntryStreamReader(fp, chunk_size=chunk_size)
    reader.expect_start(root_name)
    loaded = read_entries(reader, entry_type, target)
    reader.expect_end_of_input()
    return loaded


def loads(
    text: str | bytes,
    *,
    root: str = DEFAULT_ROOT_ELEMENT,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    target: EntryMap[K, V] | None = None,
) -> EntryMap[K, V]:
    source: IO[str] | IO[bytes] = io.BytesIO(text) if isinstance(text, bytes) else io.StringIO(text)
    return load(source, root=root, entry_type=entry_type, target=target)


def save(
    path: PathLike,
    mapping: EntryMap[K, V],
    *,
    root: str = DEFAULT_ROOT_ELEMENT,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    indent: str | None = DEFAULT_INDENT,
) -> int:
    """Serialize ``mapping`` to ``path`` atomically.

    The document is rendered in memory first, so a failing entry never leaves a
    partially written file behind.
    """

    buffer = io.StringIO()
    written = dump(mapping, buffer, root=root, entry_type=entry_type, indent=indent)
    atomic_write(path, buffer.getvalue(), encoding="utf-8")
    return written


def open_map(
    path: PathLike,
    *,
    root: str = DEFAULT_ROOT_ELEMENT,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> EntryMap[K, V]:
    """Load the document stored at ``path``."""

    with Path(path).open("rb") as file_handle:
        return load(file_handle, root=root, entry_type=entry_type, chunk_size=chunk_size)
