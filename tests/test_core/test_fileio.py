"""Tests for folio.core.fileio module."""

import os

import pytest

from folio.core.fileio import atomic_write_text, remove_file


def test_atomic_write_creates_parents(tmp_path):
    target = tmp_path / "a" / "b" / "file.txt"

    result = atomic_write_text(target, "hello")

    assert result == target
    assert target.read_text() == "hello"


def test_atomic_write_replaces_existing(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("old")

    atomic_write_text(target, "new")

    assert target.read_text() == "new"


def test_atomic_write_leaves_no_temp_files(tmp_path):
    atomic_write_text(tmp_path / "file.txt", "x")

    assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


def test_atomic_write_cleans_up_on_failure(tmp_path, monkeypatch):
    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail)

    with pytest.raises(OSError, match="disk full"):
        atomic_write_text(tmp_path / "file.txt", "x")

    assert list(tmp_path.iterdir()) == []


def test_atomic_write_keeps_newlines(tmp_path):
    target = tmp_path / "file.txt"

    atomic_write_text(target, "a\r\nb\n")

    assert target.read_bytes() == b"a\r\nb\n"


def test_remove_file(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("x")

    assert remove_file(target) is True
    assert not target.exists()
    assert remove_file(target) is False
