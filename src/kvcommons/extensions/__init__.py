"""Stateless helpers: decimals, enum metadata, ranges, medians and strings."""

from kvcommons.extensions.enums import (
    DEFAULT_CODE,
    EnumMetadata,
    enum_metadata,
    get_alternate_name,
    get_code,
    get_extension,
    lookup_metadata,
    register_enum_metadata,
)
from kvcommons.extensions.numbers import (
    MAX_DECIMALS,
    fractional_digit_count,
    integer_digit_count,
    is_positive,
    round_down,
)
from kvcommons.extensions.ranges import (
    in_range,
    in_range_above,
    in_range_below,
    in_range_exclusive,
    match_any,
)
from kvcommons.extensions.sequences import median
from kvcommons.extensions.strings import (
    count_heading_matches,
    count_included_candidates,
    escape_for_command_line,
    is_null_or_empty,
    is_null_or_whitespace,
)

__all__ = [
    "DEFAULT_CODE",
    "EnumMetadata",
    "MAX_DECIMALS",
    "count_heading_matches",
    "count_included_candidates",
    "enum_metadata",
    "escape_for_command_line",
    "fractional_digit_count",
    "get_alternate_name",
    "get_code",
    "get_extension",
    "in_range",
    "in_range_above",
    "in_range_below",
    "in_range_exclusive",
    "integer_digit_count",
    "is_null_or_empty",
    "is_null_or_whitespace",
    "is_positive",
    "lookup_metadata",
    "match_any",
    "median",
    "register_enum_metadata",
    "round_down",
]
