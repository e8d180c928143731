"""Textual encode/decode pairs for scalar key and value types."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Final, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

__all__ = [
    "BOOLEAN",
    "BUILTIN_CODECS",
    "DECIMAL",
    "DOUBLE",
    "INT",
    "STRING",
    "ScalarCodec",
    "codec_by_name",
    "codec_for_type",
    "enum_codec",
]

_TRUE_TOKENS: Final[frozenset[str]] = frozenset({"true", "1"})
_FALSE_TOKENS: Final[frozenset[str]] = frozenset({"false", "0"})


@dataclass(frozen=True, slots=True)
class ScalarCodec(Generic[T]):
    """Stable text encoding for one Python type.

    ``name`` is the wire token written into the ``type`` attribute of ``Key``/``Value``
    elements. ``decode`` raises ``ValueError`` for text it cannot parse.
    """

    name: str
    python_type: type[T]
    _encode: Callable[[T], str]
    _decode: Callable[[str], T]

    def encode(self, value: T) -> str:
        if not self.accepts(value):
            raise TypeError(
                f"{self.name} codec cannot encode {type(value).__name__} value {value!r}"
            )
        return self._encode(value)

    def decode(self, text: str) -> T:
        return self._decode(text)

    def accepts(self, value: object) -> bool:
        if self.python_type is int and isinstance(value, bool):
            return False
        return isinstance(value, self.python_type)


def _decode_int(text: str) -> int:
    return int(text.strip())


def _decode_decimal(text: str) -> Decimal:
    try:
        return Decimal(text.strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal literal: {text!r}") from exc


def _encode_double(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return repr(value)


def _decode_double(text: str) -> float:
    normalized = text.strip()
    if normalized == "INF":
        return math.inf
    if normalized == "-INF":
        return -math.inf
    return float(normalized)


def _encode_boolean(value: bool) -> str:
    return "true" if value else "false"


def _decode_boolean(text: str) -> bool:
    normalized = text.strip()
    if normalized in _TRUE_TOKENS:
        return True
    if normalized in _FALSE_TOKENS:
        return False
    raise ValueError(f"invalid boolean literal: {text!r}")


STRING: Final[ScalarCodec[str]] = ScalarCodec("string", str, str, str)
INT: Final[ScalarCodec[int]] = ScalarCodec("int", int, str, _decode_int)
DECIMAL: Final[ScalarCodec[Decimal]] = ScalarCodec("decimal", Decimal, str, _decode_decimal)
DOUBLE: Final[ScalarCodec[float]] = ScalarCodec("double", float, _encode_double, _decode_double)
BOOLEAN: Final[ScalarCodec[bool]] = ScalarCodec("boolean", bool, _encode_boolean, _decode_boolean)

BUILTIN_CODECS: Final[dict[str, ScalarCodec[Any]]] = {
    codec.name: codec for codec in (STRING, INT, DECIMAL, DOUBLE, BOOLEAN)
}

_CODECS_BY_TYPE: Final[dict[type, ScalarCodec[Any]]] = {
    codec.python_type: codec for codec in BUILTIN_CODECS.values()
}


def enum_codec(enum_type: type[E]) -> ScalarCodec[E]:
    """Build a codec that writes enum members by name."""

    def _decode(text: str) -> E:
        name = text.strip()
        try:
            return enum_type[name]
        except KeyError as exc:
            raise ValueError(f"{name!r} is not a member of {enum_type.__name__}") from exc

    return ScalarCodec(enum_type.__name__, enum_type, lambda member: member.name, _decode)


def codec_by_name(name: str) -> ScalarCodec[Any]:
    """Return a built-in codec by its wire token."""

    try:
        return BUILTIN_CODECS[name]
    except KeyError as exc:
        supported = ", ".join(sorted(BUILTIN_CODECS))
        raise ValueError(f"unknown scalar type {name!r}; expected one of: {supported}") from exc


def codec_for_type(python_type: type[T]) -> ScalarCodec[T]:
    """Return the codec for ``python_type``; enum types get a generated codec."""

    if isinstance(python_type, type) and issubclass(python_type, Enum):
        return enum_codec(python_type)  # type: ignore[return-value]
    try:
        return _CODECS_BY_TYPE[python_type]
    except KeyError as exc:
        raise TypeError(f"no scalar codec registered for {python_type!r}") from exc
