"""
Request routing.

Custom handlers claim URI prefixes; anything they don't claim is looked up in
the content index.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qs, unquote, urlsplit

from folio.content.frontmatter import to_bool
from folio.content.index import ContentIndex
from folio.core.paths import remove_double_slashes

logger = logging.getLogger(__name__)

# Called as handler(remainder, request); the return value is passed through
RouteHandler = Callable[[str, str], Any]


class Router:
    """Resolves request URIs to pages or custom handlers."""

    def __init__(self, index: ContentIndex):
        self.index = index
        self._handlers: dict[str, RouteHandler] = {}

    @staticmethod
    def normalize_handle(uri: str) -> str:
        """Handler prefix form: leading slash, decoded, no trailing slash."""
        if not uri.startswith("/"):
            uri = "/" + uri
        return unquote(remove_double_slashes(uri)).rstrip("/")

    def register_handler(self, uri: str, handler: RouteHandler) -> Router:
        """Route every request under ``uri`` to ``handler``.

        Handlers are tried in registration order.
        """
        self._handlers[self.normalize_handle(uri)] = handler
        return self

    @staticmethod
    def parse_request(request: str) -> tuple[str, bool]:
        """Split a request URI into its path and preview flag."""
        parts = urlsplit(request)
        query = parse_qs(parts.query)
        preview = to_bool(query.get("preview", ["false"])[-1])
        return parts.path or "/", preview

    def resolve(self, request: str, drafts: bool | None = None) -> Any:
        """Resolve a request URI.

        Args:
            request: Path with optional query string ("/blog/post?preview=1")
            drafts: Force draft visibility; by default drafts are visible when
                previewing and drafts are enabled

        Returns:
            Whatever the matching handler returns, else the Page, else None
        """
        path, preview = self.parse_request(request)
        if drafts is None:
            drafts = preview if self.index.config.drafts_enabled else False

        handle = self.normalize_handle(path)
        for prefix, handler in self._handlers.items():
            if handle == prefix or handle.startswith(prefix + "/"):
                remainder = "/" + handle[len(prefix):].lstrip("/")
                logger.debug("Routing %s to handler %s", path, prefix or "/")
                return handler(remainder, request)

        return self.index.get(path, include_drafts=drafts)

    def all(self, include_drafts: bool = False) -> list[str]:
        """Sorted page routes plus handler prefixes (shown as ``prefix/...``)."""
        routes = list(self.index.pages(include_drafts))
        routes.extend(f"{prefix}/..." for prefix in self._handlers)
        return sorted(routes)

    def drafts(self) -> list[str]:
        return sorted(self.index.drafts())
