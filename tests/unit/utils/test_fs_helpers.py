"""
kvcommons - unit tests for filesystem helpers

File: tests/unit/utils/test_fs_helpers.py
"""

from __future__ import annotations

from pathlib import Path

import pytest

from kvcommons.utils import atomic_write, resolve_executable


@pytest.mark.unit
def test_atomic_write_replaces_content_and_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "map.xml"
    atomic_write(target, "first")
    atomic_write(target, b"second")

    assert target.read_bytes() == b"second"
    assert [item.name for item in tmp_path.iterdir()] == ["map.xml"]


@pytest.mark.unit
def test_atomic_write_encodes_text_with_requested_encoding(tmp_path: Path) -> None:
    target = tmp_path / "map.xml"
    atomic_write(target, "é", encoding="latin-1")

    assert target.read_bytes() == b"\xe9"


@pytest.mark.unit
def test_atomic_write_cleans_up_when_encoding_fails(tmp_path: Path) -> None:
    target = tmp_path / "map.xml"

    with pytest.raises(UnicodeEncodeError):
        atomic_write(target, "中", encoding="ascii")

    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_resolve_executable_only_accepts_existing_files(tmp_path: Path) -> None:
    tool = tmp_path / "regasm"
    tool.write_text("", encoding="utf-8")

    assert resolve_executable(tool) == tool.resolve()
    assert resolve_executable(tmp_path) is None
    assert resolve_executable(tmp_path / "missing") is None
