"""
Content pages.

A Page is a markdown file under the content root plus everything derived from
it: its route and URL, its cache identity, and five lazily computed fields
(``meta``, ``html``, ``raw``, ``body``, ``bare``). The lazy fields are loaded
on first access and always dropped together.

``html`` and ``meta`` come from the on-disk cache when it is valid; otherwise
the page is compiled once and both fields are filled from that single run.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml
from bs4 import BeautifulSoup

from folio.cache.store import CacheStore
from folio.content.compiler import MarkdownCompiler
from folio.content.extensions import ExtensionRegistry, default_extensions
from folio.content.filters import FilterPipeline
from folio.content.frontmatter import (
    FrontMatterDocument,
    FrontMatterParser,
    split_front_matter,
)
from folio.core.config import ContentConfig
from folio.core.crypto import compute_text_hash
from folio.core.errors import AlreadyExists, MalformedFrontMatter, NotFound
from folio.core.fileio import atomic_write_text, remove_file
from folio.core.paths import encode_route, join_uri, split_basename

logger = logging.getLogger(__name__)

LAZY_FIELDS = ("meta", "html", "raw", "body", "bare")

# Fields answered by the page itself rather than its metadata
PAGE_FIELDS = (
    "path",
    "basename",
    "filename",
    "extension",
    "directory",
    "relative_path",
    "id",
    "hashid",
    "route",
    "url",
    "draft",
) + LAZY_FIELDS

_UNLOADED = object()

_URL_RE = re.compile(r"https?://[-\w.]+[-\w](?::\d+)?(?:/(?:[\w/_.#-]*(?:\?\S+)?[^.\s])?)?")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_bare(html: str) -> str:
    """Plain text projection of HTML: no markup, no entities, no URLs."""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    text = _URL_RE.sub(" ", unquote(text))
    return _WHITESPACE_RE.sub(" ", text.replace("\xa0", " ")).strip()


class ContentFile:
    """Identity of a file below a content root.

    Raises:
        NotFound: If the path does not exist
    """

    def __init__(self, path: Path | str, root: Path | str):
        path = Path(path).absolute()
        if not path.exists():
            raise NotFound(f"Content file not found: {path}")

        self.path = path
        self.basename = path.name
        self.extension = path.suffix.lstrip(".")
        self.filename = path.stem
        self.directory = path.parent

        self.relative_path = Path(os.path.relpath(path, Path(root).absolute())).as_posix()
        stem = self.relative_path[: -len(path.suffix)] if path.suffix else self.relative_path
        self.id = "/" + stem

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"


class Page(ContentFile):
    """A content page. Instances are made by a PageFactory."""

    def __init__(self, path: Path | str, factory: PageFactory):
        self.factory = factory
        self.config = factory.config
        super().__init__(path, self.config.content_dir)

        self.hashid = compute_text_hash(self.id)
        self.route = self._derive_route()
        self.url = self.config.root_url.rstrip("/") + encode_route(self.route)

        self._fields: dict[str, Any] = dict.fromkeys(LAZY_FIELDS, _UNLOADED)
        self._source: FrontMatterDocument | None = None
        self._changes: dict[str, Any] = {}
        self._cache_valid: bool | None = None

    def _derive_route(self) -> str:
        route = self.id
        marker = self.config.draft_marker
        dirname, base = split_basename(route)
        if marker and base.startswith(marker):
            route = join_uri(dirname, base.lstrip(marker))

        if route == "/index" or route.endswith("/index"):
            route = route[: -len("index")]
        return route

    # Source document

    def _source_document(self) -> FrontMatterDocument:
        """Front matter and body as stored on disk (no filters applied)."""
        if self._source is None:
            raw = self.raw
            try:
                self._source = self.factory.parser.parse(raw)
            except MalformedFrontMatter as e:
                if self.config.strict:
                    raise
                logger.warning("%s: %s; using empty metadata", self.relative_path, e)
                split = split_front_matter(raw)
                self._source = FrontMatterDocument({}, split.body, split.separator, split.format)
        return self._source

    @property
    def meta_separator(self) -> str | None:
        return self._source_document().separator

    @property
    def meta_format(self) -> str:
        return self._source_document().format

    @property
    def draft(self) -> bool:
        """True for draft-marked files and pages published in the future."""
        marker = self.config.draft_marker
        if marker and self.basename.startswith(marker):
            return True

        published = self._source_document().meta.get("published")
        if isinstance(published, datetime):
            return published > datetime.now(published.tzinfo)
        return False

    # Lazy fields

    def _get(self, name: str) -> Any:
        if self._fields[name] is _UNLOADED:
            self._fields[name] = getattr(self, f"_load_{name}")()
        return self._fields[name]

    @property
    def meta(self) -> dict[str, Any]:
        return self._get("meta")

    @property
    def html(self) -> str:
        return self._get("html")

    @property
    def raw(self) -> str:
        return self._get("raw")

    @property
    def body(self) -> str:
        return self._get("body")

    @property
    def bare(self) -> str:
        return self._get("bare")

    def _use_cache(self) -> bool:
        return self.config.cache_enabled and self.validate_cache()

    def _load_meta(self) -> dict[str, Any]:
        if self._use_cache():
            try:
                return self.factory.cache.read_meta(self.hashid)
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Unreadable cache for %s, recompiling: %s", self.id, e)
        html, meta = self.compile()
        self._fields["html"] = html
        return meta

    def _load_html(self) -> str:
        if self._use_cache():
            try:
                return self.factory.cache.read_html(self.hashid)
            except OSError as e:
                logger.warning("Unreadable cache for %s, recompiling: %s", self.id, e)
        html, meta = self.compile()
        self._fields["meta"] = meta
        return html

    def _load_raw(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def _load_body(self) -> str:
        return self._source_document().body

    def _load_bare(self) -> str:
        return strip_bare(self.html)

    def load(self) -> Page:
        """Populate every lazy field."""
        for name in LAZY_FIELDS:
            self._get(name)
        return self

    def unload(self) -> Page:
        """Drop every lazy field; they are recomputed on next access."""
        self._fields = dict.fromkeys(LAZY_FIELDS, _UNLOADED)
        self._source = None
        self._changes = {}
        return self

    # Compilation and cache

    def _filter_failed(self, name: str, hook: str, error: Exception) -> None:
        logger.warning("Filter %r (%s) failed on %s, skipped: %s", name, hook, self.id, error)

    def compile(self) -> tuple[str, dict[str, Any]]:
        """Compile the source file and refresh the cache.

        Returns:
            Tuple of (html, metadata snapshot)

        Raises:
            OSError: If the cache artifacts can't be written
        """
        source = self._source_document()
        meta = dict(source.meta)
        on_error = None if self.config.strict else self._filter_failed

        html = self.factory.pipeline.run(
            source.body,
            meta,
            self.factory.compiler.compile,
            file=self.path,
            on_error=on_error,
        )
        self.factory.extensions.apply(html, meta, self)

        if self.config.cache_enabled:
            self.factory.cache.write(self.hashid, meta, html)
        self._cache_valid = True
        logger.debug("Compiled %s", self.id)
        return html, dict(meta)

    def validate_cache(self, ignore_mtime: bool | None = None) -> bool:
        """Check the cache artifacts, memoizing the answer.

        Passing ``ignore_mtime`` forces a fresh check with that policy.
        """
        if self._cache_valid is None or ignore_mtime is not None:
            self._cache_valid = self.factory.cache.is_valid(self.hashid, self.path, ignore_mtime)
        return self._cache_valid

    def clear_cache(self) -> Page:
        """Remove the cache artifacts and unload."""
        self.factory.cache.clear(self.hashid)
        self._cache_valid = None
        return self.unload()

    def refresh_cache(self) -> Page:
        """Forget cache validity and unload; nothing is recompiled yet."""
        self._cache_valid = None
        return self.unload()

    # Persistence

    def save(self) -> Page:
        """Write the current metadata and body back to the source file.

        Only the source metadata and values passed to set() are written;
        computed and filtered metadata never reach the file. The file keeps
        its fence and format. The cache artifacts are removed; the
        page is recompiled on next access.

        Raises:
            OSError: If the file can't be written
        """
        source = self._source_document()
        meta = {**source.meta, **self._changes}

        text = self.factory.parser.dump(meta, self.body, source.separator, source.format)
        atomic_write_text(self.path, text)
        logger.info("Saved %s", self.relative_path)
        return self.clear_cache()

    def delete(self) -> bool:
        """Remove the source file. Cache artifacts are left in place."""
        removed = remove_file(self.path)
        self.unload()
        return removed

    # Field access

    def get(self, key: str, default: Any = None) -> Any:
        """Page field if ``key`` names one, else a metadata value."""
        if key in PAGE_FIELDS:
            return getattr(self, key)
        return self.meta.get(key, default)

    def set(self, key: str, value: Any) -> Page:
        """Set a metadata value, or replace the body.

        Raises:
            KeyError: For read-only page fields
        """
        if key == "body":
            self._fields["body"] = value
        elif key in PAGE_FIELDS:
            raise KeyError(f"{key!r} is a read-only page field")
        else:
            self.meta[key] = value
            self._changes[key] = value
        return self

    def has(self, key: str) -> bool:
        """True when the value is present and not an empty string or collection."""
        value = self.get(key)
        if value is None:
            return False
        if isinstance(value, (str, list, tuple, dict, set)):
            return len(value) > 0
        return True

    def is_truthy(self, key: str) -> bool:
        return bool(self.get(key))

    @property
    def title(self) -> str:
        return self.meta.get("title") or self.filename

    def export(self) -> dict[str, Any]:
        """Page fields and metadata as a plain dict."""
        self.load()
        data: dict[str, Any] = {}
        for name in PAGE_FIELDS:
            value = getattr(self, name)
            data[name] = str(value) if isinstance(value, Path) else value
        return data


class PageFactory:
    """Builds pages that share configuration, cache and compile pipeline."""

    def __init__(
        self,
        config: ContentConfig,
        pipeline: FilterPipeline | None = None,
        compiler: MarkdownCompiler | None = None,
        cache: CacheStore | None = None,
        extensions: ExtensionRegistry | None = None,
        parser: FrontMatterParser | None = None,
    ):
        self.config = config
        self.pipeline = pipeline if pipeline is not None else FilterPipeline()
        self.compiler = compiler or MarkdownCompiler(config.markdown_extensions, config.strict)
        self.cache = cache or CacheStore.from_config(config)
        self.extensions = extensions if extensions is not None else default_extensions()
        self.parser = parser or FrontMatterParser.from_config(config)

    def _absolute(self, path: Path | str) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.config.content_dir / path

    def make(self, path: Path | str) -> Page:
        """Build a page for an existing file.

        Raises:
            NotFound: If the file does not exist
        """
        return Page(self._absolute(path), self)

    def create(
        self,
        path: Path | str,
        body: str = "",
        meta: dict[str, Any] | None = None,
        template: Path | str | bool | None = None,
    ) -> Page:
        """Write a new content file and return its page.

        Args:
            path: New file path, absolute or relative to the content root
            body: Markdown body; the template body is used when empty
            meta: Metadata, merged over the template metadata
            template: Template file; None uses the sibling default file if
                there is one, False disables templates

        Raises:
            AlreadyExists: If the file already exists
            OSError: If the file can't be written
        """
        path = self._absolute(path)
        if path.exists():
            raise AlreadyExists(f"Content file already exists: {path}")

        if template is None or template is True:
            default = path.parent / self.config.template_name
            template = default if default.is_file() else False

        merged: dict[str, Any] = {}
        if template is not False:
            tpl = self.make(template)  # type: ignore[arg-type]
            merged.update(tpl._source_document().meta)
            if not body:
                body = tpl.body
        merged.update(meta or {})

        atomic_write_text(path, self.parser.dump(merged, body))
        logger.info("Created %s", path)
        return self.make(path)
