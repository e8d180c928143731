"""Aggregate helpers over numeric sequences."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar, overload

T = TypeVar("T")

__all__ = ["median"]


@overload
def median(values: Iterable[float]) -> float: ...


@overload
def median(values: Iterable[T], key: Callable[[T], float]) -> float: ...


def median(values: Iterable[object], key: Callable[[object], float] | None = None) -> float:
    """Return the median of ``values`` (optionally projected through ``key``).

    An even number of values yields the mean of the two middle values. Empty input
    raises ``ValueError``.
    """

    projected = sorted(float(key(item)) if key is not None else float(item) for item in values)  # type: ignore[arg-type]
    if not projected:
        raise ValueError("median of an empty sequence is undefined")
    middle = len(projected) // 2
    if len(projected) % 2 == 0:
        return (projected[middle - 1] + projected[middle]) / 2
    return projected[middle]
