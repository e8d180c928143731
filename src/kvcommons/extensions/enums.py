"""
kvcommons - enum metadata table

File: src/kvcommons/extensions/enums.py

Purpose
- Attach a numeric code, a file extension and an alternate display name to enum
  members through an explicit table instead of runtime introspection.

Functional requirements
- Owners register metadata once, next to the enum definition.
- Lookups for unregistered members return the documented defaults:
  code ``-1``, extension ``""``, alternate name ``""``.
- Registering the same member twice raises ``ValueError``.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Final, TypeVar

E = TypeVar("E", bound=Enum)

DEFAULT_CODE: Final[int] = -1

__all__ = [
    "DEFAULT_CODE",
    "EnumMetadata",
    "enum_metadata",
    "get_alternate_name",
    "get_code",
    "get_extension",
    "lookup_metadata",
    "register_enum_metadata",
]


@dataclass(frozen=True, slots=True)
class EnumMetadata:
    code: int = DEFAULT_CODE
    extension: str = ""
    alternate_name: str = ""


_TABLE_LOCK = threading.Lock()
# Keyed by (enum type, member name): IntEnum members of different types compare equal.
_TABLE: dict[tuple[type[Enum], str], EnumMetadata] = {}


def register_enum_metadata(
    member: Enum,
    *,
    code: int = DEFAULT_CODE,
    extension: str = "",
    alternate_name: str = "",
) -> EnumMetadata:
    """Register metadata for a single enum member."""

    if not isinstance(member, Enum):
        raise TypeError(f"expected an enum member, got {type(member).__name__}")
    metadata = EnumMetadata(code=code, extension=extension, alternate_name=alternate_name)
    with _TABLE_LOCK:
        key = _table_key(member)
        if key in _TABLE:
            raise ValueError(f"metadata already registered for {member!r}")
        _TABLE[key] = metadata
    return metadata


def enum_metadata(enum_type: type[E], entries: Mapping[E, EnumMetadata]) -> type[E]:
    """Register metadata for several members of ``enum_type`` and return the type.

    Example::

        class FileKind(Enum):
            TEXT = "text"
            CSV = "csv"

        enum_metadata(FileKind, {
            FileKind.TEXT: EnumMetadata(code=1, extension=".txt", alternate_name="Text"),
            FileKind.CSV: EnumMetadata(code=2, extension=".csv"),
        })
    """

    for member, metadata in entries.items():
        if not isinstance(member, enum_type):
            raise TypeError(f"{member!r} is not a member of {enum_type.__name__}")
        register_enum_metadata(
            member,
            code=metadata.code,
            extension=metadata.extension,
            alternate_name=metadata.alternate_name,
        )
    return enum_type


def lookup_metadata(member: Enum) -> EnumMetadata | None:
    with _TABLE_LOCK:
        return _TABLE.get(_table_key(member))


def get_code(member: Enum) -> int:
    metadata = lookup_metadata(member)
    return DEFAULT_CODE if metadata is None else metadata.code


def get_extension(member: Enum) -> str:
    metadata = lookup_metadata(member)
    return "" if metadata is None else metadata.extension


def get_alternate_name(member: Enum) -> str:
    metadata = lookup_metadata(member)
    return "" if metadata is None else metadata.alternate_name


def _table_key(member: Enum) -> tuple[type[Enum], str]:
    return type(member), member.name
