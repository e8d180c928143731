"""
kvcommons - streaming XML writer and pull reader

File: src/kvcommons/codec/stream.py

Purpose
- Provide the structured text stream the entry codec writes to and reads from.

Functional requirements
- The writer emits well-formed XML incrementally to any object with ``write``.
- The reader pulls normalized start/end/text tokens from an incremental SAX parser
  fed in chunks, so large inputs are never loaded in full.
- Input that ends early surfaces as ``TruncatedStreamError``; XML syntax errors
  surface as ``MalformedEntryError``. Neither is ever swallowed.

Non-functional requirements
- Standard library XML only (``xml.sax``); external entities stay disabled.
- Single-threaded; one reader or writer per stream.
"""

from __future__ import annotations

import re
import xml.sax
import xml.sax.expatreader
import xml.sax.handler
import xml.sax.xmlreader
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Final
from xml.sax.saxutils import escape, quoteattr

from kvcommons.codec.errors import MalformedEntryError, TruncatedStreamError

DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024
DEFAULT_INDENT: Final[str] = "  "

# Characters outside the XML 1.0 Char production cannot be written at all.
_INVALID_XML_CHARS_RE: Final[re.Pattern[str]] = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)
# A literal CR would be normalized to LF by any conforming parser.
_TEXT_ENTITIES: Final[dict[str, str]] = {"\r": "&#13;"}

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_INDENT",
    "EndToken",
    "EntryStreamReader",
    "EntryStreamWriter",
    "StartToken",
    "TextToken",
    "Token",
]


@dataclass(frozen=True, slots=True)
class StartToken:
    name: str
    attrs: Mapping[str, str] = field(default_factory=dict)
    line: int | None = None
    column: int | None = None


@dataclass(frozen=True, slots=True)
class EndToken:
    name: str
    line: int | None = None
    column: int | None = None


@dataclass(frozen=True, slots=True)
class TextToken:
    text: str
    line: int | None = None
    column: int | None = None

    @property
    def is_whitespace(self) -> bool:
        return not self.text.strip()


Token = StartToken | EndToken | TextToken


class EntryStreamWriter:
    """Incremental XML writer with optional pretty-printing."""

    def __init__(
        self,
        out: IO[str],
        *,
        encoding: str = "utf-8",
        indent: str | None = DEFAULT_INDENT,
    ) -> None:
        if indent is not None and indent.strip():
            raise ValueError("indent must contain only whitespace")
        self._out = out
        self._encoding = encoding
        self._indent = indent
        self._open: list[str] = []
        self._has_children: list[bool] = []

    @property
    def depth(self) -> int:
        return len(self._open)

    def start_document(self) -> None:
        self._out.write(f'<?xml version="1.0" encoding="{self._encoding}"?>\n')

    def end_document(self) -> None:
        if self._open:
            raise ValueError(f"cannot end document with open elements: {self._open!r}")
        self._out.write("\n")
        flush = getattr(self._out, "flush", None)
        if callable(flush):
            flush()

    def start_element(self, name: str, attrs: Mapping[str, str] | None = None) -> None:
        if self._has_children:
            self._has_children[-1] = True
            self._newline(len(self._open))
        rendered = "".join(
            f" {attr_name}={quoteattr(_checked(attr_value))}"
            for attr_name, attr_value in (attrs or {}).items()
        )
        self._out.write(f"<{name}{rendered}>")
        self._open.append(name)
        self._has_children.append(False)

    def end_element(self, name: str) -> None:
        if not self._open or self._open[-1] != name:
            current = self._open[-1] if self._open else None
            raise ValueError(f"cannot close <{name}> while <{current}> is open")
        self._open.pop()
        if self._has_children.pop():
            self._newline(len(self._open))
        self._out.write(f"</{name}>")

    def text(self, content: str) -> None:
        self._out.write(escape(_checked(content), _TEXT_ENTITIES))

    def text_element(
        self,
        name: str,
        content: str,
        attrs: Mapping[str, str] | None = None,
    ) -> None:
        self.start_element(name, attrs)
        self.text(content)
        self.end_element(name)

    def _newline(self, depth: int) -> None:
        if self._indent is not None:
            self._out.write("\n" + self._indent * depth)


class _TokenCollector(xml.sax.handler.ContentHandler):
    """SAX handler that queues events as tokens."""

    def __init__(self, tokens: deque[Token]) -> None:
        super().__init__()
        self._tokens = tokens
        self._locator: xml.sax.xmlreader.Locator | None = None

    def setDocumentLocator(self, locator: xml.sax.xmlreader.Locator) -> None:  # noqa: N802
        self._locator = locator

    def startElement(self, name: str, attrs: xml.sax.xmlreader.AttributesImpl) -> None:  # noqa: N802
        line, column = self._position()
        self._tokens.append(StartToken(name, dict(attrs.items()), line, column))

    def endElement(self, name: str) -> None:  # noqa: N802
        line, column = self._position()
        self._tokens.append(EndToken(name, line, column))

    def characters(self, content: str) -> None:
        line, column = self._position()
        self._tokens.append(TextToken(content, line, column))

    def _position(self) -> tuple[int | None, int | None]:
        if self._locator is None:
            return None, None
        column = self._locator.getColumnNumber()
        return self._locator.getLineNumber(), None if column is None else column + 1


class EntryStreamReader:
    """Pull reader over an XML stream.

    Tokens are produced on demand by feeding ``source`` to an incremental SAX parser
    ``chunk_size`` characters (or bytes) at a time. The reader tracks the stack of
    elements it has handed out so callers can ask which region they are in.
    """

    def __init__(self, source: IO[str] | IO[bytes], *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self._source = source
        self._chunk_size = chunk_size
        self._tokens: deque[Token] = deque()
        self._open: list[str] = []
        self._exhausted = False
        self._last_position: tuple[int | None, int | None] = (None, None)

        parser = xml.sax.make_parser()
        parser.setFeature(xml.sax.handler.feature_namespaces, False)
        parser.setFeature(xml.sax.handler.feature_external_ges, False)
        handler = _TokenCollector(self._tokens)
        parser.setContentHandler(handler)
        # ``feed`` never installs a locator; only ``parse`` does.
        handler.setDocumentLocator(xml.sax.expatreader.ExpatLocator(parser))
        self._parser = parser

    @property
    def current_element(self) -> str | None:
        """Name of the innermost element whose start tag has been consumed."""

        return self._open[-1] if self._open else None

    @property
    def depth(self) -> int:
        return len(self._open)

    def peek(self) -> Token | None:
        """Return the next token without consuming it, or ``None`` at end of input."""

        self._fill()
        return self._tokens[0] if self._tokens else None

    def next(self) -> Token:
        """Consume and return the next token."""

        token = self.peek()
        if token is None:
            raise TruncatedStreamError(
                self._truncation_message(), line=self._last_position[0], column=self._last_position[1]
            )
        self._tokens.popleft()
        self._last_position = (token.line, token.column)
        if isinstance(token, StartToken):
            self._open.append(token.name)
        elif isinstance(token, EndToken):
            self._open.pop()
        return token

    def peek_structural(self) -> Token | None:
        """Skip whitespace-only text and return the next token without consuming it."""

        while True:
            token = self.peek()
            if isinstance(token, TextToken) and token.is_whitespace:
                self.next()
                continue
            return token

    def expect_start(self, name: str | None = None) -> StartToken:
        token = self._next_structural()
        if not isinstance(token, StartToken):
            expected = f"<{name}>" if name else "a start tag"
            raise _unexpected(token, expected)
        if name is not None and token.name != name:
            raise _unexpected(token, f"<{name}>")
        return token

    def expect_end(self, name: str) -> EndToken:
        token = self._next_structural()
        if not isinstance(token, EndToken) or token.name != name:
            raise _unexpected(token, f"</{name}>")
        return token

    def read_element_text(self, name: str) -> str:
        """Collect character data up to and including ``</name>``.

        Must be called directly after the element's start tag was consumed.
        """

        if self.current_element != name:
            raise ValueError(f"reader is not positioned inside <{name}>")
        parts: list[str] = []
        while True:
            token = self.next()
            if isinstance(token, TextToken):
                parts.append(token.text)
                continue
            if isinstance(token, EndToken):
                return "".join(parts)
            raise _unexpected(token, f"text content or </{name}>")

    def expect_end_of_input(self) -> None:
        """Require that no further markup or text follows."""

        token = self.peek_structural()
        if token is not None:
            raise _unexpected(token, "end of input")

    def _next_structural(self) -> Token:
        self.peek_structural()
        return self.next()

    def _fill(self) -> None:
        while not self._tokens and not self._exhausted:
            chunk = self._source.read(self._chunk_size)
            if chunk:
                try:
                    self._parser.feed(chunk)
                except xml.sax.SAXParseException as exc:
                    raise MalformedEntryError(
                        f"invalid XML: {exc.getMessage()}",
                        line=exc.getLineNumber(),
                        column=_column(exc),
                    ) from exc
                continue
            self._exhausted = True
            try:
                self._parser.close()
            except xml.sax.SAXParseException as exc:
                raise TruncatedStreamError(
                    f"{self._truncation_message()}: {exc.getMessage()}",
                    line=exc.getLineNumber(),
                    column=_column(exc),
                ) from exc

    def _truncation_message(self) -> str:
        if self._open:
            return f"input ended before closing </{self._open[-1]}>"
        return "input ended unexpectedly"


def _checked(text: str) -> str:
    match = _INVALID_XML_CHARS_RE.search(text)
    if match is not None:
        raise ValueError(f"character {match.group()!r} cannot be represented in XML 1.0")
    return text


def _column(exc: xml.sax.SAXParseException) -> int | None:
    column = exc.getColumnNumber()
    return None if column is None else column + 1


def _describe(token: Token) -> str:
    if isinstance(token, StartToken):
        return f"<{token.name}>"
    if isinstance(token, EndToken):
        return f"</{token.name}>"
    return f"text {token.text.strip()[:40]!r}"


def _unexpected(token: Token, expected: str) -> MalformedEntryError:
    return MalformedEntryError(
        f"expected {expected}, found {_describe(token)}",
        line=token.line,
        column=token.column,
    )
