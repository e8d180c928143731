"""
kvcommons - unit tests for range predicates and the median helper

File: tests/unit/extensions/test_ranges_and_median.py
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from kvcommons.extensions import (
    in_range,
    in_range_above,
    in_range_below,
    in_range_exclusive,
    match_any,
    median,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "closed", "below", "above", "exclusive"),
    [
        (1, True, True, False, False),
        (2, True, True, True, True),
        (3, True, False, True, False),
        (0, False, False, False, False),
        (4, False, False, False, False),
    ],
)
def test_range_boundaries(value: int, closed: bool, below: bool, above: bool, exclusive: bool) -> None:
    assert in_range(value, 1, 3) is closed
    assert in_range_below(value, 1, 3) is below
    assert in_range_above(value, 1, 3) is above
    assert in_range_exclusive(value, 1, 3) is exclusive


@pytest.mark.unit
def test_ranges_work_for_any_comparable() -> None:
    assert in_range("m", "a", "z")
    assert in_range(Decimal("1.5"), Decimal("1"), Decimal("2"))


@pytest.mark.unit
def test_match_any() -> None:
    assert match_any("--register", "--register", "--unregister")
    assert not match_any("--help", "--register", "--unregister")
    assert not match_any("x")


@pytest.mark.unit
def test_median_odd_even_and_key() -> None:
    assert median([3, 1, 2]) == 2
    assert median([4, 1, 3, 2]) == 2.5
    assert median(["aaa", "b", "cc", "dddd"], key=len) == 2.5
    assert median([Decimal("1.5")]) == 1.5


@pytest.mark.unit
def test_median_of_empty_input_raises() -> None:
    with pytest.raises(ValueError, match="empty"):
        median([])
