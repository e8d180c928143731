"""Decimal truncation and digit-counting helpers."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Final

MAX_DECIMALS: Final[int] = 28

__all__ = [
    "MAX_DECIMALS",
    "fractional_digit_count",
    "integer_digit_count",
    "is_positive",
    "round_down",
]


def round_down(value: Decimal, decimals: int) -> Decimal:
    """Truncate ``value`` toward zero, keeping ``decimals`` fractional digits.

    ``decimals`` must be within ``0..28``; anything else raises ``ValueError``.
    """

    if decimals < 0 or decimals > MAX_DECIMALS:
        raise ValueError(f"decimals must be between 0 and {MAX_DECIMALS}, got {decimals}")
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the kept fraction.
        ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)


def is_positive(value: Decimal | int | float) -> bool:
    """Return ``True`` when ``value`` is strictly greater than zero."""

    return value > 0


def integer_digit_count(value: Decimal) -> int:
    """Count the digits of the integer part, ignoring sign and leading zeros.

    ``Decimal("123.45")`` -> 3, ``Decimal("0.5")`` -> 0.
    """

    integer_part, _, _ = _plain(value).partition(".")
    return len(integer_part.lstrip("0"))


def fractional_digit_count(value: Decimal) -> int:
    """Count the digits after the decimal point, ignoring trailing zeros.

    ``Decimal("1.500")`` -> 1, ``Decimal("12")`` -> 0.
    """

    _, _, fractional_part = _plain(value).partition(".")
    return len(fractional_part.rstrip("0"))


def _plain(value: Decimal) -> str:
    # Fixed-point notation without sign; ``str`` may switch to exponent form.
    return format(abs(value), "f")
