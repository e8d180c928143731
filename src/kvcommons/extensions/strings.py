"""String predicates, character counting and command-line escaping."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Final

__all__ = [
    "count_heading_matches",
    "count_included_candidates",
    "escape_for_command_line",
    "is_null_or_empty",
    "is_null_or_whitespace",
]

# Backslashes directly before a double quote, plus the quote itself.
_QUOTE_WITH_BACKSLASHES_RE: Final[re.Pattern[str]] = re.compile(r'(\\*)"')
_TRAILING_BACKSLASHES_RE: Final[re.Pattern[str]] = re.compile(r"(\\+)$")


def is_null_or_empty(value: str | None) -> bool:
    return not value


def is_null_or_whitespace(value: str | None) -> bool:
    return value is None or not value.strip()


def count_included_candidates(value: str | None, candidates: Iterable[str] | None) -> int:
    """Count distinct characters of ``value`` that appear in ``candidates``.

    ``None`` for either argument counts as empty.
    """

    if not value or candidates is None:
        return 0
    wanted = set(candidates)
    return sum(1 for char in set(value) if char in wanted)


def count_heading_matches(value: str, pattern: str | re.Pattern[str]) -> int:
    """Count leading characters of ``value`` that each match ``pattern``.

    The pattern is evaluated against one character at a time, so anchors are not needed.
    """

    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    count = 0
    for char in value:
        if compiled.search(char) is None:
            break
        count += 1
    return count


def escape_for_command_line(value: str) -> str:
    """Quote ``value`` as a single argument for MSVCRT-style command-line parsing.

    Backslashes preceding a double quote are doubled and the quote is escaped;
    trailing backslashes are doubled so they cannot escape the closing quote; the
    result is wrapped in double quotes.
    """

    escaped = _QUOTE_WITH_BACKSLASHES_RE.sub(lambda match: match.group(1) * 2 + '\\"', value)
    escaped = _TRAILING_BACKSLASHES_RE.sub(lambda match: match.group(1) * 2, escaped)
    return f'"{escaped}"'
