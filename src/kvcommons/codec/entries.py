"""
kvcommons - element-per-entry codec for ``EntryMap``

File: src/kvcommons/codec/entries.py

Purpose
- Write a container's entries as independent ``<KeyValue>`` blocks and rebuild a
  container from such blocks.

Wire shape of one block (tag name comes from the declared ``EntryType``)::

    <KeyValue>
      <Key type="string">a</Key>
      <Value type="int">1</Value>
    </KeyValue>

Functional requirements
- Blocks are written in the container's enumeration order with no header or footer.
- Reading stops only at the closing tag of the enclosing region; there is no count.
- Duplicate keys on read resolve last-write-wins.
- Input ending before the closing tag raises ``TruncatedStreamError``; a block of the
  wrong shape or with undecodable text raises ``MalformedEntryError``. One bad block
  fails the whole read.
- A failed read leaves ``target`` untouched: entries are merged only after the closing
  tag has been consumed.

Non-functional requirements
- Stateless; no logging and no retry. Errors propagate to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from kvcommons.codec.entry_types import (
    DEFAULT_ENTRY_TYPE,
    KEY_ELEMENT,
    TYPE_ATTRIBUTE,
    VALUE_ELEMENT,
    EntryRecord,
    EntryType,
)
from kvcommons.codec.errors import MalformedEntryError, TruncatedStreamError
from kvcommons.codec.stream import EndToken
from kvcommons.collections.mapping import EntryMap

if TYPE_CHECKING:
    from kvcommons.codec.scalars import ScalarCodec
    from kvcommons.codec.stream import EntryStreamReader, EntryStreamWriter

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")

__all__ = ["read_entries", "write_entries"]


def write_entries(
    mapping: EntryMap[K, V],
    writer: EntryStreamWriter,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
) -> int:
    """Write one block per entry of ``mapping`` and return the number written.

    The caller owns the enclosing region element: ``writer`` must already be inside
    it, and the caller closes it afterwards.
    """

    written = 0
    for key, value in mapping.enumerate():
        _write_record(writer, EntryRecord(key, value), entry_type)
        written += 1
    return written


def read_entries(
    reader: EntryStreamReader,
    entry_type: EntryType[K, V] = DEFAULT_ENTRY_TYPE,  # type: ignore[assignment]
    target: EntryMap[K, V] | None = None,
) -> EntryMap[K, V]:
    """Read blocks until the enclosing region's closing tag and return the container.

    ``reader`` must be positioned directly after the region's start tag. When
    ``target`` is given the decoded entries are inserted into it (overwriting equal
    keys) and ``target`` is returned; otherwise a new ``EntryMap`` is returned.
    """

    region = reader.current_element
    if region is None:
        raise ValueError("reader is not positioned inside a region element")

    decoded: EntryMap[K, V] = EntryMap()
    while True:
        token = reader.peek_structural()
        if token is None:
            raise TruncatedStreamError(f"input ended before closing </{region}>")
        if isinstance(token, EndToken):
            reader.expect_end(region)
            break
        record = _read_record(reader, entry_type)
        decoded.insert(record.key, record.value)

    if target is None:
        return decoded
    target.update(decoded)
    return target


def _write_record(
    writer: EntryStreamWriter,
    record: EntryRecord[K, V],
    entry_type: EntryType[K, V],
) -> None:
    # Encode both halves first so an unencodable entry never leaves a half-open block.
    key_text = entry_type.key_codec.encode(record.key)
    value_text = entry_type.value_codec.encode(record.value)

    writer.start_element(entry_type.name)
    writer.text_element(KEY_ELEMENT, key_text, {TYPE_ATTRIBUTE: entry_type.key_codec.name})
    writer.text_element(VALUE_ELEMENT, value_text, {TYPE_ATTRIBUTE: entry_type.value_codec.name})
    writer.end_element(entry_type.name)


def _read_record(reader: EntryStreamReader, entry_type: EntryType[K, V]) -> EntryRecord[K, V]:
    reader.expect_start(entry_type.name)
    key = _read_scalar(reader, KEY_ELEMENT, entry_type.key_codec)
    value = _read_scalar(reader, VALUE_ELEMENT, entry_type.value_codec)
    reader.expect_end(entry_type.name)
    return EntryRecord(key, value)


def _read_scalar(reader: EntryStreamReader, element: str, codec: ScalarCodec[T]) -> T:
    start = reader.expect_start(element)
    declared = start.attrs.get(TYPE_ATTRIBUTE)
    if declared is not None and declared != codec.name:
        raise MalformedEntryError(
            f"<{element}> declares type {declared!r}, expected {codec.name!r}",
            line=start.line,
            column=start.column,
        )
    text = reader.read_element_text(element)
    try:
        return codec.decode(text)
    except ValueError as exc:
        raise MalformedEntryError(
            f"<{element}> text {text!r} is not a valid {codec.name}: {exc}",
            line=start.line,
            column=start.column,
        ) from exc
