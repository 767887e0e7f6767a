"""Markdown to HTML compilation."""

from __future__ import annotations

import logging

import markdown

from folio.core.errors import MarkdownCompileError

logger = logging.getLogger(__name__)


class MarkdownCompiler:
    """Thin wrapper around Python-Markdown.

    ``compile`` never raises unless ``strict`` is set; a failing document
    compiles to an empty string.
    """

    def __init__(self, extensions: tuple[str, ...] = ("extra",), strict: bool = False):
        self.extensions = list(extensions)
        self.strict = strict
        self._md = markdown.Markdown(extensions=self.extensions, output_format="html")

    def compile(self, text: str) -> str:
        try:
            self._md.reset()
            return self._md.convert(text)
        except Exception as e:
            if self.strict:
                raise MarkdownCompileError(f"Markdown compilation failed: {e}") from e
            logger.warning("Markdown compilation failed, using empty HTML: %s", e)
            return ""

    __call__ = compile
