"""
Computed metadata.

Extensions are named functions evaluated in registration order at the end of
page compilation. Each receives the compiled HTML, the metadata produced so
far and the page, and its return value is stored under its name.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup

if TYPE_CHECKING:
    from folio.content.page import Page

MetadataExtension = Callable[[str, dict[str, Any], "Page"], Any]


class ExtensionRegistry:
    """Ordered registry of computed metadata functions."""

    def __init__(self, extensions: list[tuple[str, MetadataExtension]] | None = None):
        self._extensions: dict[str, MetadataExtension] = {}
        for name, func in extensions or []:
            self.register(name, func)

    def register(self, name: str, func: MetadataExtension) -> ExtensionRegistry:
        self._extensions[name] = func
        return self

    def remove(self, name: str) -> ExtensionRegistry:
        self._extensions.pop(name, None)
        return self

    def has(self, name: str) -> bool:
        return name in self._extensions

    @property
    def names(self) -> list[str]:
        return list(self._extensions)

    def __iter__(self) -> Iterator[tuple[str, MetadataExtension]]:
        return iter(list(self._extensions.items()))

    def __len__(self) -> int:
        return len(self._extensions)

    def apply(self, html: str, meta: dict[str, Any], page: Page) -> dict[str, Any]:
        """Evaluate every extension and store the results in ``meta``."""
        for name, func in self:
            meta[name] = func(html, meta, page)
        return meta


def _mtime(page: Page) -> datetime:
    return datetime.fromtimestamp(page.path.stat().st_mtime)


def title(html: str, meta: dict[str, Any], page: Page) -> str:
    value = meta.get("title")
    return str(value) if value not in (None, "") else page.filename


def excerpt(html: str, meta: dict[str, Any], page: Page) -> str:
    """Custom excerpt rendered as markdown, else the first paragraph."""
    if meta.get("excerpt"):
        return page.factory.compiler.compile(str(meta["excerpt"]))

    first = BeautifulSoup(html, "html.parser").find("p")
    return first.decode_contents() if first is not None else ""


def author(html: str, meta: dict[str, Any], page: Page) -> Any:
    return meta.get("author", page.config.author)


def language(html: str, meta: dict[str, Any], page: Page) -> Any:
    return meta.get("language", page.config.language)


def keywords(html: str, meta: dict[str, Any], page: Page) -> list[str]:
    return list(meta.get("keywords") or [])


def updated(html: str, meta: dict[str, Any], page: Page) -> datetime:
    return meta.get("updated") or _mtime(page)


def modified(html: str, meta: dict[str, Any], page: Page) -> datetime:
    return _mtime(page)


def default_extensions() -> ExtensionRegistry:
    """The computed fields every page gets."""
    return ExtensionRegistry(
        [
            ("title", title),
            ("keywords", keywords),
            ("excerpt", excerpt),
            ("author", author),
            ("updated", updated),
            ("modified", modified),
            ("language", language),
        ]
    )
