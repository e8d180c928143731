"""Entry records and the declared entry type used to tag serialized blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Final, Generic, TypeVar

from kvcommons.codec.scalars import STRING, ScalarCodec
from kvcommons.constants import DEFAULT_ENTRY_NAME

K = TypeVar("K")
V = TypeVar("V")

KEY_ELEMENT: Final[str] = "Key"
VALUE_ELEMENT: Final[str] = "Value"
TYPE_ATTRIBUTE: Final[str] = "type"

_XML_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9._-]*$")

__all__ = [
    "DEFAULT_ENTRY_NAME",
    "DEFAULT_ENTRY_TYPE",
    "KEY_ELEMENT",
    "TYPE_ATTRIBUTE",
    "VALUE_ELEMENT",
    "EntryRecord",
    "EntryType",
    "get_schema",
    "validate_element_name",
]


def validate_element_name(value: str, field_name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string, got {type(value).__name__}")
    normalized = value.strip()
    if not _XML_NAME_RE.fullmatch(normalized) or normalized.lower().startswith("xml"):
        raise ValueError(f"{field_name} is not a valid XML element name: {value!r}")
    return normalized


@dataclass(frozen=True, slots=True)
class EntryRecord(Generic[K, V]):
    """Transient transfer unit for one key/value pair during a write or read."""

    key: K
    value: V


@dataclass(frozen=True, slots=True)
class EntryType(Generic[K, V]):
    """Declared shape of one entry block.

    ``name`` becomes the block element tag; the key and value codecs supply the
    textual form and the ``type`` attribute token of each half.
    """

    key_codec: ScalarCodec[K]
    value_codec: ScalarCodec[V]
    name: str = field(default=DEFAULT_ENTRY_NAME)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", validate_element_name(self.name, "EntryType.name"))


DEFAULT_ENTRY_TYPE: Final[EntryType[str, str]] = EntryType(STRING, STRING)


def get_schema() -> Any:
    """Return the schema describing the entry format.

    Always returns ``None``: the format carries no schema document and schema
    introspection is unsupported. Each block names its own key and value types.
    """

    return None
