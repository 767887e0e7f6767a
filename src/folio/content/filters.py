"""
Filter pipeline wrapping markdown compilation.

Each filter may transform the raw markdown before compilation and the HTML
after it. Filters receive the page metadata by reference so values set by an
earlier filter are visible to later ones.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

# Called as on_error(filter_name, hook_name, exception)
ErrorHandler = Callable[[str, str, Exception], None]


class Filter:
    """Base class for filters; both hooks default to identity."""

    def before(self, markdown: str, meta: dict[str, Any], file: Path | None) -> str:
        return markdown

    def after(self, html: str, meta: dict[str, Any], file: Path | None) -> str:
        return html


class FilterPipeline:
    """An ordered, named list of filters.

    The pipeline does not catch filter errors itself. Callers that want
    degraded behaviour pass an ``on_error`` handler; the failing filter is then
    skipped and its input passed through unchanged.
    """

    def __init__(self, filters: list[tuple[str, Filter]] | None = None):
        self._filters: dict[str, Filter] = {}
        for name, flt in filters or []:
            self.add(name, flt)

    def add(self, name: str, flt: Filter) -> FilterPipeline:
        """Register a filter. Re-adding a name keeps its original position."""
        self._filters[name] = flt
        return self

    def remove(self, name: str) -> FilterPipeline:
        self._filters.pop(name, None)
        return self

    def has(self, name: str) -> bool:
        return name in self._filters

    def get(self, name: str) -> Filter | None:
        return self._filters.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._filters)

    def __iter__(self) -> Iterator[tuple[str, Filter]]:
        return iter(list(self._filters.items()))

    def __len__(self) -> int:
        return len(self._filters)

    def _apply(
        self,
        hook: str,
        text: str,
        meta: dict[str, Any],
        file: Path | None,
        on_error: ErrorHandler | None,
    ) -> str:
        for name, flt in self:
            if on_error is None:
                text = getattr(flt, hook)(text, meta, file)
                continue
            try:
                text = getattr(flt, hook)(text, meta, file)
            except Exception as e:
                on_error(name, hook, e)
        return text

    def before(
        self,
        markdown: str,
        meta: dict[str, Any],
        file: Path | None = None,
        on_error: ErrorHandler | None = None,
    ) -> str:
        """Run every ``before`` hook in registration order."""
        return self._apply("before", markdown, meta, file, on_error)

    def after(
        self,
        html: str,
        meta: dict[str, Any],
        file: Path | None = None,
        on_error: ErrorHandler | None = None,
    ) -> str:
        """Run every ``after`` hook in registration order."""
        return self._apply("after", html, meta, file, on_error)

    def run(
        self,
        markdown: str,
        meta: dict[str, Any],
        compile_markdown: Callable[[str], str],
        file: Path | None = None,
        on_error: ErrorHandler | None = None,
    ) -> str:
        """Run before hooks, compile, then run after hooks.

        Args:
            markdown: Markdown body
            meta: Mutable metadata shared by all filters
            compile_markdown: Markdown to HTML function
            file: Source file, if any
            on_error: Optional handler; when given, failing filters are skipped

        Returns:
            Final HTML
        """
        markdown = self.before(markdown, meta, file, on_error)
        html = compile_markdown(markdown)
        return self.after(html, meta, file, on_error)
