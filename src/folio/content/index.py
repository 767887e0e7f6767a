"""
Filesystem content index.

Scans the content root once for markdown pages and keeps three route-keyed
maps: published pages, drafts, and both combined (a draft wins when a route
exists in both). Before the full scan has run, ``get`` resolves single pages
straight from disk and remembers them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from folio.content.page import Page, PageFactory
from folio.content.transforms import build_pipeline
from folio.core.config import ContentConfig
from folio.core.paths import clean_uri, join_uri, split_basename

logger = logging.getLogger(__name__)

VCS_DIRS = {".git", ".hg", ".svn", ".bzr", "CVS"}


class ContentIndex:
    """Route-keyed index of the pages under a content root.

    Args:
        config: Content configuration
        factory: Page factory; by default one is built whose filter pipeline
            resolves links through this index
    """

    def __init__(self, config: ContentConfig, factory: PageFactory | None = None):
        self.config = config
        self.factory = factory or PageFactory(config, pipeline=build_pipeline(config, self))

        self._published: dict[str, Page] = {}
        self._drafts: dict[str, Page] = {}
        self._combined: dict[str, Page] = {}
        self._processed = False

    @property
    def root_path(self) -> Path:
        return self.config.content_dir

    @property
    def processed(self) -> bool:
        return self._processed

    # Normalization

    def _is_dir(self, uri: str) -> bool:
        return (self.root_path / uri.strip("/")).is_dir()

    def _strip_draft_marker(self, uri: str) -> str:
        marker = self.config.draft_marker
        dirname, basename = split_basename(uri)
        if marker and basename.startswith(marker):
            trailing = "/" if uri.endswith("/") else ""
            return join_uri(dirname, basename.lstrip(marker)) + trailing
        return uri

    def _strip_extension(self, uri: str) -> str:
        suffix = "." + self.config.extension
        while uri.endswith(suffix):
            uri = uri[: -len(suffix)]
        return uri

    def normalize_route(self, uri: str) -> str:
        """Canonical route form of a URI, id or relative file path.

        Examples:
            "blog/_post.md" -> "/blog/post"
            "/blog/index"   -> "/blog/"
            "/blog"         -> "/blog/"  (when blog is a directory)
            "/about/"       -> "/about"  (when about is not a directory)
        """
        uri = clean_uri(uri)
        uri = self._strip_draft_marker(uri)
        uri = self._strip_extension(uri)

        dirname, basename = split_basename(uri)
        if basename == "index" and not uri.endswith("/"):
            uri = dirname.rstrip("/") + "/"

        if uri == "/":
            return uri
        if self._is_dir(uri):
            return uri if uri.endswith("/") else uri + "/"
        return uri.rstrip("/")

    def normalize_query(self, uri: str) -> str:
        """Canonical form of a subtree or single-route query."""
        uri = clean_uri(uri)
        if uri != "/" and self._is_dir(uri) and not uri.endswith("/"):
            uri += "/"
        return uri

    def normalize_path(self, uri: str) -> str:
        """Root-relative path of the (non-draft) file a URI designates."""
        uri = self._strip_draft_marker(clean_uri(uri))
        if self._is_dir(uri):
            uri = uri.rstrip("/") + "/index"
        elif uri != "/" and uri.endswith("/"):
            uri = uri.rstrip("/")

        suffix = "." + self.config.extension
        if not uri.endswith(suffix):
            uri += suffix
        return uri

    # Scanning

    def _is_hidden(self, dirname: str) -> bool:
        marker = self.config.hidden_marker
        return bool(marker) and any(part.startswith(marker) for part in dirname.split("/") if part)

    def scan_pages(self) -> list[Path]:
        """Find every eligible content file below the root, sorted by path."""
        suffix = "." + self.config.extension
        found: list[Path] = []
        if not self.root_path.is_dir():
            logger.warning("Content directory does not exist: %s", self.root_path)
            return found

        for dirpath, dirnames, filenames in os.walk(self.root_path, followlinks=True):
            dirnames[:] = sorted(
                d
                for d in dirnames
                if d not in VCS_DIRS
                and not d.startswith(".")
                and not self._is_hidden(d)
            )
            for name in sorted(filenames):
                if name.startswith(".") or name == self.config.template_name:
                    continue
                if name.endswith(suffix):
                    found.append(Path(dirpath) / name)
        return found

    def _add(self, page: Page) -> None:
        if page.draft:
            self._drafts[page.route] = page
            self._combined[page.route] = page
        else:
            self._published[page.route] = page
            self._combined.setdefault(page.route, page)

    def _process(self) -> None:
        for path in self.scan_pages():
            self._add(self.factory.make(path))
        self._processed = True
        logger.debug(
            "Indexed %d published pages and %d drafts",
            len(self._published),
            len(self._drafts),
        )

    def pages(self, preview: bool = False) -> dict[str, Page]:
        """Published pages, or published and drafts when previewing."""
        if not self._processed:
            self._process()
        return self._combined if preview else self._published

    def drafts(self) -> dict[str, Page]:
        if not self._processed:
            self._process()
        return self._drafts

    # Lookup

    def _visible(self, include_drafts: bool, drafts_only: bool) -> dict[str, Page]:
        if drafts_only:
            return self._drafts
        return self._combined if include_drafts else self._published

    def _from_maps(self, route: str, include_drafts: bool, drafts_only: bool) -> Page | None:
        pages = self._visible(include_drafts, drafts_only)
        page = pages.get(route)
        # A file and a directory may share a name (a.md next to a/)
        if page is None and route != "/" and route.endswith("/"):
            page = pages.get(route.rstrip("/"))
        return page

    def _probe(self, uri: str, include_drafts: bool, drafts_only: bool) -> Page | None:
        dirname, basename = split_basename(uri)
        if self._is_hidden(dirname) or basename == self.config.template_name:
            return None

        if include_drafts or drafts_only:
            draft_path = self.root_path / join_uri(
                dirname, self.config.draft_marker + basename
            ).lstrip("/")
            if draft_path.is_file():
                page = self.factory.make(draft_path)
                self._add(page)
                return page

        path = self.root_path / uri.lstrip("/")
        if not path.is_file():
            return None

        page = self.factory.make(path)
        self._add(page)
        if page.draft:
            return page if (include_drafts or drafts_only) else None
        return None if drafts_only else page

    def get(
        self,
        id: str,
        include_drafts: bool = False,
        drafts_only: bool = False,
    ) -> Page | None:
        """Look up a page by route, id or relative path.

        Args:
            id: Anything that normalizes to a route ("blog/post", "/blog/_post.md")
            include_drafts: Also return draft pages
            drafts_only: Only return draft pages

        Returns:
            Page, or None if nothing visible matches
        """
        route = self.normalize_route(id)
        page = self._from_maps(route, include_drafts, drafts_only)
        if page is not None or self._processed:
            return page

        page = self._probe(self.normalize_path(id), include_drafts, drafts_only)
        if page is None and route != "/" and route.endswith("/"):
            file_uri = route.rstrip("/") + "." + self.config.extension
            page = self._probe(file_uri, include_drafts, drafts_only)
        return page

    def query(
        self,
        uri: str,
        depth: int = 0,
        include_drafts: bool = False,
        drafts_only: bool = False,
    ) -> dict[str, Page]:
        """Pages below a directory URI, or the single page a URI names.

        Args:
            uri: "blog/" style subtree, or a single route
            depth: Maximum levels below the subtree (0 = unlimited)
            include_drafts: Include drafts when drafts are enabled
            drafts_only: Only drafts (when drafts are enabled)

        Returns:
            Route to page mapping in index order
        """
        if not self.config.drafts_enabled:
            if drafts_only:
                return {}
            include_drafts = False

        uri = self.normalize_query(uri)
        pages = self.drafts() if drafts_only else self.pages(include_drafts)

        if not uri.endswith("/"):
            route = self.normalize_route(uri)
            page = pages.get(route)
            return {route: page} if page is not None else {}

        start = uri.rstrip("/").count("/")
        result: dict[str, Page] = {}
        for route, page in pages.items():
            if route == uri or not route.startswith(uri):
                continue
            if depth > 0 and route.rstrip("/").count("/") - start > depth:
                continue
            result[route] = page
        return result

    # Directory helpers

    def get_path(self, uri: str) -> Path | None:
        """Filesystem path for a URI if it exists."""
        path = self.root_path / self.normalize_query(uri).lstrip("/")
        return path if path.exists() else None

    def _listing(self, uri: str, recursive: bool, want_dirs: bool) -> list[str] | None:
        base = self.get_path(uri)
        if base is None or not base.is_dir():
            return None

        entries = base.rglob("*") if recursive else base.iterdir()
        return sorted(
            "/" + entry.relative_to(self.root_path).as_posix()
            for entry in entries
            if entry.is_dir() == want_dirs
        )

    def files(self, uri: str = "/", recursive: bool = False) -> list[str] | None:
        """Root-relative file paths in a directory, or None if it isn't one."""
        return self._listing(uri, recursive, want_dirs=False)

    def directories(self, uri: str = "/", recursive: bool = False) -> list[str] | None:
        """Root-relative subdirectory paths, or None if ``uri`` isn't a directory."""
        return self._listing(uri, recursive, want_dirs=True)

    def _template_path(self, uri: str) -> Path:
        uri = self.normalize_query(uri)
        directory = uri if uri.endswith("/") else split_basename(uri)[0]
        return self.root_path / directory.strip("/") / self.config.template_name

    def get_directory_template(self, uri: str) -> Page | None:
        path = self._template_path(uri)
        return self.factory.make(path) if path.is_file() else None

    def create_directory_template(self, uri: str) -> Page | None:
        """Create an empty template in a directory.

        Returns:
            The new template page, or None if one already exists
        """
        path = self._template_path(uri)
        if path.exists():
            return None
        return self.factory.create(path, template=False)
