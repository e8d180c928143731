"""Range and membership predicates for comparable values."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

__all__ = [
    "in_range",
    "in_range_above",
    "in_range_below",
    "in_range_exclusive",
    "match_any",
]


class _Comparable(Protocol):
    def __lt__(self, other: Any, /) -> bool: ...

    def __le__(self, other: Any, /) -> bool: ...


C = TypeVar("C", bound=_Comparable)


def in_range(value: C, lower: C, upper: C) -> bool:
    """``lower <= value <= upper``."""

    return lower <= value and value <= upper


def in_range_below(value: C, lower: C, upper: C) -> bool:
    """``lower <= value < upper``."""

    return lower <= value and value < upper


def in_range_above(value: C, lower: C, upper: C) -> bool:
    """``lower < value <= upper``."""

    return lower < value and value <= upper


def in_range_exclusive(value: C, lower: C, upper: C) -> bool:
    """``lower < value < upper``."""

    return lower < value and value < upper


def match_any(value: object, *candidates: object) -> bool:
    """Return ``True`` when ``value`` equals any of ``candidates``."""

    return any(candidate == value for candidate in candidates)
