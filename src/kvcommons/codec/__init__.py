"""
kvcommons codec package public API.

File: src/kvcommons/codec/__init__.py

Purpose
- Export the entry codec, its stream abstraction, scalar codecs and error types.

Functional requirements
- The codec carries no schema: ``get_schema()`` always returns ``None``.
"""

from kvcommons.codec.document import (
    DEFAULT_ROOT_ELEMENT,
    dump,
    dumps,
    load,
    loads,
    open_map,
    save,
)
from kvcommons.codec.entries import read_entries, write_entries
from kvcommons.codec.entry_types import (
    DEFAULT_ENTRY_NAME,
    DEFAULT_ENTRY_TYPE,
    EntryRecord,
    EntryType,
    get_schema,
)
from kvcommons.codec.errors import (
    CodecError,
    MalformedEntryError,
    MalformedInputError,
    TruncatedStreamError,
)
from kvcommons.codec.scalars import (
    BOOLEAN,
    DECIMAL,
    DOUBLE,
    INT,
    STRING,
    ScalarCodec,
    codec_by_name,
    codec_for_type,
    enum_codec,
)
from kvcommons.codec.stream import (
    EndToken,
    EntryStreamReader,
    EntryStreamWriter,
    StartToken,
    TextToken,
)

__all__ = [
    "BOOLEAN",
    "CodecError",
    "DECIMAL",
    "DEFAULT_ENTRY_NAME",
    "DEFAULT_ENTRY_TYPE",
    "DEFAULT_ROOT_ELEMENT",
    "DOUBLE",
    "EndToken",
    "EntryRecord",
    "EntryStreamReader",
    "EntryStreamWriter",
    "EntryType",
    "INT",
    "MalformedEntryError",
    "MalformedInputError",
    "STRING",
    "ScalarCodec",
    "StartToken",
    "TextToken",
    "TruncatedStreamError",
    "codec_by_name",
    "codec_for_type",
    "dump",
    "dumps",
    "enum_codec",
    "get_schema",
    "load",
    "loads",
    "open_map",
    "read_entries",
    "save",
    "write_entries",
]
