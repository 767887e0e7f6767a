"""Tests for the markdown compiler."""

import pytest

from folio.content.compiler import MarkdownCompiler
from folio.core.errors import MarkdownCompileError


def test_compiles_markdown():
    compiler = MarkdownCompiler()

    assert compiler.compile("# Title\n\nSome *text*.") == "<h1>Title</h1>\n<p>Some <em>text</em>.</p>"


def test_callable():
    compiler = MarkdownCompiler()

    assert compiler("plain") == "<p>plain</p>"


def test_extra_extension_tables():
    html = MarkdownCompiler(("extra",)).compile("| a | b |\n|---|---|\n| 1 | 2 |\n")

    assert "<table>" in html


def test_state_does_not_leak_between_documents():
    compiler = MarkdownCompiler(("extra",))
    compiler.compile("Text[^1]\n\n[^1]: Note")

    assert "footnote" not in compiler.compile("Plain")


def test_failure_degrades_to_empty_html(monkeypatch):
    compiler = MarkdownCompiler()

    def explode(text):
        raise ValueError("bad input")

    monkeypatch.setattr(compiler._md, "convert", explode)

    assert compiler.compile("anything") == ""


def test_failure_raises_in_strict_mode(monkeypatch):
    compiler = MarkdownCompiler(strict=True)

    def explode(text):
        raise ValueError("bad input")

    monkeypatch.setattr(compiler._md, "convert", explode)

    with pytest.raises(MarkdownCompileError, match="bad input"):
        compiler.compile("anything")
