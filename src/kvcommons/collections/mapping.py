"""
kvcommons - generic mapping container

File: src/kvcommons/collections/mapping.py

Purpose
- Provide ``EntryMap``, an associative container with unique keys that keeps the
  insertion order of the underlying ``dict``.

Functional requirements
- ``insert`` overwrites silently; the original slot keeps its enumeration position.
- ``enumerate`` returns a fresh lazy iterator on every call.
- Equality compares key sets and per-key values; order is never part of equality.

Non-functional requirements
- Holds no serialization logic. The XML codec lives in ``kvcommons.codec`` and only
  uses the public read/write/iterate operations defined here.
- Not thread-safe. Mutating while an enumeration is in progress is unsupported.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping
from enum import Enum
from typing import Final, Generic, Literal, TypeVar, overload

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
D = TypeVar("D")

__all__ = ["ABSENT", "Absent", "EntryMap"]


class Absent(Enum):
    """Marker returned by ``EntryMap.try_get`` when a key has no entry."""

    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = Absent.ABSENT


class EntryMap(Generic[K, V]):
    """Order-preserving key/value container built by composition over ``dict``."""

    __slots__ = ("_entries",)

    def __init__(self, source: Mapping[K, V] | Iterable[tuple[K, V]] | None = None) -> None:
        self._entries: dict[K, V] = {}
        if source is None:
            return
        if isinstance(source, EntryMap):
            pairs: Iterable[tuple[K, V]] = source.enumerate()
        elif isinstance(source, Mapping):
            pairs = source.items()
        else:
            pairs = source
        for key, value in pairs:
            self.insert(key, value)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, key: K, value: V) -> None:
        """Insert ``value`` under ``key``, overwriting any existing value."""

        self._entries[key] = value

    def remove(self, key: K) -> bool:
        """Remove ``key``; return ``True`` if an entry was removed."""

        if key not in self._entries:
            return False
        del self._entries[key]
        return True

    def clear(self) -> None:
        self._entries.clear()

    def update(self, other: EntryMap[K, V]) -> None:
        """Insert every entry of ``other`` in its enumeration order (last write wins)."""

        for key, value in other.enumerate():
            self.insert(key, value)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def try_get(self, key: K) -> V | Literal[Absent.ABSENT]:
        """Return the value stored for ``key`` or ``ABSENT`` when there is none.

        A stored ``None`` comes back as ``None``, so absence is always explicit.
        """

        return self._entries.get(key, ABSENT)

    @overload
    def get(self, key: K) -> V | None: ...

    @overload
    def get(self, key: K, default: D) -> V | D: ...

    def get(self, key: K, default: object = None) -> object:
        return self._entries.get(key, default)

    def __getitem__(self, key: K) -> V:
        return self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def enumerate(self) -> Iterator[tuple[K, V]]:
        """Yield ``(key, value)`` pairs in insertion order.

        Each call returns a new iterator over the current entries.
        """

        return iter(self._entries.items())

    def keys(self) -> Iterable[K]:
        """Read-only view over the keys."""

        return self._entries.keys()

    def values(self) -> Iterable[V]:
        """Read-only view over the values."""

        return self._entries.values()

    def __iter__(self) -> Iterator[K]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def size(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Snapshots and comparison
    # ------------------------------------------------------------------

    def copy(self) -> EntryMap[K, V]:
        return EntryMap(self._entries)

    def to_dict(self) -> dict[K, V]:
        return dict(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EntryMap):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            return self._entries == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"EntryMap({self._entries!r})"
