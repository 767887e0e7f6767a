"""
Content manager.

One object wiring the index, router, cache and filter pipeline together for
a site, with the operations templates and commands need.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from folio.content.filters import Filter, FilterPipeline
from folio.content.index import ContentIndex
from folio.content.menu import MenuBuilder, MenuNode
from folio.content.page import Page, PageFactory
from folio.content.pagination import Pagination
from folio.content.router import RouteHandler, Router
from folio.content.search import Search
from folio.core.config import ContentConfig, load_config

logger = logging.getLogger(__name__)


class ContentManager:
    """Facade over the content index of one site."""

    def __init__(self, config: ContentConfig, index: ContentIndex | None = None):
        self.config = config
        self.index = index or ContentIndex(config)
        self.router = Router(self.index)
        self.menus = MenuBuilder(self.index)
        self._menu_cache: dict[str, list[MenuNode]] = {}

    @classmethod
    def from_site(cls, site_root: Path | None = None) -> ContentManager:
        """Create a manager for a site, loading its folio.yaml."""
        return cls(load_config(site_root))

    @property
    def factory(self) -> PageFactory:
        return self.index.factory

    @property
    def filters(self) -> FilterPipeline:
        return self.factory.pipeline

    def add_filter(self, name: str, flt: Filter) -> ContentManager:
        self.filters.add(name, flt)
        return self

    def remove_filter(self, name: str) -> ContentManager:
        self.filters.remove(name)
        return self

    def register_handler(self, uri: str, handler: RouteHandler) -> ContentManager:
        self.router.register_handler(uri, handler)
        return self

    # Lookup

    def get(self, id: str, include_drafts: bool = False, drafts_only: bool = False) -> Page | None:
        return self.index.get(id, include_drafts, drafts_only)

    def resolve(self, request: str) -> Any:
        return self.router.resolve(request)

    def all(self, include_drafts: bool = False) -> dict[str, Page]:
        return self.index.pages(include_drafts)

    def query(self, uri: str, depth: int = 0, include_drafts: bool = False) -> dict[str, Page]:
        return self.index.query(uri, depth, include_drafts)

    def every_page(self) -> list[Page]:
        """Every published and draft page, including ones shadowed by a draft."""
        return list(self.index.pages().values()) + list(self.index.drafts().values())

    def search(
        self,
        terms: str,
        pages: Iterable[Page] | Mapping[str, Page] | None = None,
    ) -> Search:
        """Search published pages (or ``pages``) with the configured word lists."""
        if pages is None:
            pages = self.index.pages()
        return Search(pages, terms, self.config.search_exclude, self.config.search_low_value)

    def paginate(
        self,
        items: Iterable[Any] | Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Pagination:
        if items is None:
            items = self.index.pages()
        return Pagination(items, limit or self.config.pagination, page)

    # Menus

    def _menu_definition(self, name: str) -> list[dict[str, Any]] | None:
        combined = self.index.get_path(self.config.menus_file)
        if combined is not None and combined.is_file():
            try:
                return self.menus.load(combined, name)
            except ValueError:
                logger.debug("Menu %r not defined in %s", name, combined)

        single = self.index.get_path("/" + name.replace(".", "/").lstrip("/") + ".yml")
        if single is not None and single.is_file():
            return self.menus.load(single)
        return None

    def menu(self, name: str) -> list[MenuNode]:
        """Build a named menu.

        The menu is read from the combined menus file in the content root, or
        else from ``<name>.yml``. An unknown menu is empty.
        """
        if name not in self._menu_cache:
            definition = self._menu_definition(name)
            if definition is None:
                logger.warning("No menu named %r", name)
            self._menu_cache[name] = self.menus.build(definition or [])
        return self._menu_cache[name]

    # Cache maintenance

    def stale_pages(self, force: bool = False) -> list[Page]:
        """Pages whose cache is stale, or every page when forced."""
        return [page for page in self.every_page() if force or not page.validate_cache(ignore_mtime=False)]

    def compile(self, force: bool = False, pages: list[Page] | None = None) -> list[Page]:
        """Compile pages whose cache is stale (or every page when forced).

        Args:
            force: Compile pages with a valid cache too
            pages: Pages to compile, as picked by stale_pages()

        Returns:
            Pages that were compiled
        """
        compiled = self.stale_pages(force) if pages is None else pages
        for page in compiled:
            page.compile()
            page.unload()
        logger.info("Compiled %d pages", len(compiled))
        return compiled

    def sweep_cache(self) -> list[str]:
        """Remove cache artifacts whose page no longer exists."""
        return self.factory.cache.sweep(page.hashid for page in self.every_page())
