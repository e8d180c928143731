"""
kvcommons - unit tests for string helpers

File: tests/unit/extensions/test_string_helpers.py
"""

from __future__ import annotations

import re

import pytest

from kvcommons.extensions import (
    count_heading_matches,
    count_included_candidates,
    escape_for_command_line,
    is_null_or_empty,
    is_null_or_whitespace,
)


@pytest.mark.unit
def test_null_predicates() -> None:
    assert is_null_or_empty(None)
    assert is_null_or_empty("")
    assert not is_null_or_empty(" ")
    assert is_null_or_whitespace(" \t\n")
    assert not is_null_or_whitespace(" x ")


@pytest.mark.unit
def test_count_included_candidates_counts_distinct_characters() -> None:
    assert count_included_candidates("aabbc", "ab") == 2
    assert count_included_candidates("hello", ["l", "o", "z"]) == 2
    assert count_included_candidates(None, "abc") == 0
    assert count_included_candidates("abc", None) == 0


@pytest.mark.unit
def test_count_heading_matches_stops_at_first_mismatch() -> None:
    assert count_heading_matches("123abc456", r"\d") == 3
    assert count_heading_matches("abc", re.compile(r"\d")) == 0
    assert count_heading_matches("", r"\d") == 0


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("plain", '"plain"'),
        ("with space", '"with space"'),
        ('a"b', '"a\\"b"'),
        ('a\\"b', '"a\\\\\\"b"'),
        ("C:\\dir\\", '"C:\\dir\\\\"'),
        ("", '""'),
    ],
)
def test_escape_for_command_line(raw: str, expected: str) -> None:
    assert escape_for_command_line(raw) == expected
