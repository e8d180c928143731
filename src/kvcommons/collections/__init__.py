"""Container types shared across kvcommons."""

from kvcommons.collections.mapping import ABSENT, Absent, EntryMap

__all__ = ["ABSENT", "Absent", "EntryMap"]
