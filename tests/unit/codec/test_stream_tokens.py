"""
kvcommons - unit tests for the streaming XML writer and pull reader

File: tests/unit/codec/test_stream_tokens.py
"""

from __future__ import annotations

import io

import pytest

from kvcommons.codec import (
    EndToken,
    EntryStreamReader,
    EntryStreamWriter,
    MalformedEntryError,
    StartToken,
    TextToken,
    TruncatedStreamError,
)


@pytest.mark.unit
def test_writer_rejects_mismatched_close_and_open_document_end() -> None:
    writer = EntryStreamWriter(io.StringIO())
    writer.start_element("outer")

    with pytest.raises(ValueError, match="cannot close <inner>"):
        writer.end_element("inner")
    with pytest.raises(ValueError, match="open elements"):
        writer.end_document()


@pytest.mark.unit
def test_writer_rejects_non_whitespace_indent() -> None:
    with pytest.raises(ValueError):
        EntryStreamWriter(io.StringIO(), indent="--")


@pytest.mark.unit
def test_writer_escapes_markup_and_carriage_return() -> None:
    buffer = io.StringIO()
    writer = EntryStreamWriter(buffer, indent=None)
    writer.text_element("v", "a<b>&c\r", {"type": 'say "hi"'})

    assert buffer.getvalue() == "<v type='say \"hi\"'>a&lt;b&gt;&amp;c&#13;</v>"


@pytest.mark.unit
def test_reader_tracks_current_element_and_depth() -> None:
    reader = EntryStreamReader(io.StringIO("<a><b>text</b></a>"), chunk_size=3)

    start = reader.expect_start("a")
    assert isinstance(start, StartToken)
    assert reader.current_element == "a"
    reader.expect_start("b")
    assert reader.depth == 2
    assert reader.read_element_text("b") == "text"
    assert reader.current_element == "a"
    assert isinstance(reader.expect_end("a"), EndToken)
    reader.expect_end_of_input()
    assert reader.peek() is None


@pytest.mark.unit
def test_peek_structural_skips_whitespace_but_keeps_text() -> None:
    reader = EntryStreamReader(io.StringIO("<a>\n   <b/>  x</a>"))
    reader.expect_start("a")

    token = reader.peek_structural()
    assert isinstance(token, StartToken) and token.name == "b"
    reader.next()
    reader.expect_end("b")

    text = reader.peek_structural()
    assert isinstance(text, TextToken)
    assert not text.is_whitespace


@pytest.mark.unit
def test_tokens_carry_one_based_positions_across_chunks() -> None:
    reader = EntryStreamReader(io.StringIO("<a>\n  <b>x</b>\n</a>"), chunk_size=2)

    outer = reader.expect_start("a")
    inner = reader.expect_start("b")

    assert (outer.line, outer.column) == (1, 1)
    assert (inner.line, inner.column) == (2, 3)


@pytest.mark.unit
def test_reader_reports_positions_on_unexpected_tokens() -> None:
    reader = EntryStreamReader(io.StringIO("<a>\n  <c/>\n</a>"))
    reader.expect_start("a")

    with pytest.raises(MalformedEntryError) as excinfo:
        reader.expect_start("b")

    assert excinfo.value.line == 2
    assert excinfo.value.column == 3
    assert "(line 2, column 3)" in str(excinfo.value)


@pytest.mark.unit
def test_syntax_error_is_malformed_and_early_end_is_truncated() -> None:
    broken = EntryStreamReader(io.StringIO("<a><b></a>"))
    with pytest.raises(MalformedEntryError, match="invalid XML"):
        while True:
            broken.next()

    truncated = EntryStreamReader(io.BytesIO(b"<a><b>"))
    truncated.expect_start("a")
    truncated.expect_start("b")
    with pytest.raises(TruncatedStreamError, match="before closing </b>"):
        truncated.next()


@pytest.mark.unit
def test_read_element_text_requires_matching_position() -> None:
    reader = EntryStreamReader(io.StringIO("<a>text</a>"))
    reader.expect_start("a")

    with pytest.raises(ValueError, match="not positioned inside <b>"):
        reader.read_element_text("b")


@pytest.mark.unit
def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EntryStreamReader(io.StringIO(""), chunk_size=0)
