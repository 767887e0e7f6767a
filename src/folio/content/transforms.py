"""
Built-in content filters.

Filters are enabled by name through the ``filters`` setting in folio.yaml;
see ``build_pipeline``.
"""

from __future__ import annotations

import html as html_lib
import logging
import re
import unicodedata
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from bs4 import BeautifulSoup, NavigableString

from folio.content.filters import Filter, FilterPipeline
from folio.core.config import ContentConfig
from folio.core.paths import encode_route, is_url

if TYPE_CHECKING:
    from folio.content.index import ContentIndex

logger = logging.getLogger(__name__)

_HASHTAG_RE = re.compile(r"(^|\s)#([\w-]+)")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_SKIP_TEXT_PARENTS = ["a", "code", "pre", "script", "style"]


def slugify(text: str) -> str:
    """Turn heading text into a URL-safe id."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^\w\s-]", "", text).strip().lower()
    return re.sub(r"[\s_-]+", "-", text).strip("-")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class ResourceResolver(Protocol):
    """Resolves a resource reference found in content to a public location."""

    def resolve(self, ref: str, base_path: Path) -> str | None: ...


class StaticResourceResolver:
    """Maps files inside the content directory to URLs under ``base_url``."""

    def __init__(self, content_dir: Path, base_url: str = ""):
        self.content_dir = Path(content_dir).resolve()
        self.base_url = base_url.rstrip("/")

    def resolve(self, ref: str, base_path: Path) -> str | None:
        path = ref.split("#", 1)[0].split("?", 1)[0]
        if not path:
            return None

        if path.startswith("/"):
            candidate = (self.content_dir / path.lstrip("/")).resolve()
        else:
            candidate = (Path(base_path) / path).resolve()

        if not candidate.is_file() or not candidate.is_relative_to(self.content_dir):
            return None

        rel = candidate.relative_to(self.content_dir).as_posix()
        return f"{self.base_url}/{encode_route(rel)}"


class HeadingOffsetFilter(Filter):
    """Pushes every ATX heading down by a fixed number of levels."""

    MAX_LEVEL = 6

    def __init__(self, offset: int = 0):
        self.offset = max(0, int(offset))

    def before(self, markdown: str, meta: dict[str, Any], file: Path | None) -> str:
        offset = meta.get("headingOffset", self.offset)
        if not offset:
            return markdown

        lines = []
        in_fence = False
        for line in markdown.replace("\r\n", "\n").split("\n"):
            if _FENCE_RE.match(line):
                in_fence = not in_fence
            elif not in_fence and line.startswith("#"):
                level = len(line) - len(line.lstrip("#"))
                new_level = min(level + int(offset), self.MAX_LEVEL)
                line = "#" * new_level + line[level:]
            lines.append(line)
        return "\n".join(lines)


class HeadingIdFilter(Filter):
    """Adds slug ids to headings that don't already have one."""

    def after(self, html: str, meta: dict[str, Any], file: Path | None) -> str:
        soup = _soup(html)
        headings = soup.find_all(re.compile(r"^h[1-6]$"))
        if not headings:
            return html

        seen: dict[str, int] = {}
        for heading in headings:
            if heading.get("id"):
                continue
            slug = slugify(heading.get_text()) or "section"
            seen[slug] = seen.get(slug, 0) + 1
            heading["id"] = slug if seen[slug] == 1 else f"{slug}-{seen[slug]}"
        return str(soup)


class HashtagFilter(Filter):
    """Links #hashtags in text to the tag route."""

    def __init__(self, tag_url: str):
        self.tag_url = tag_url

    def after(self, html: str, meta: dict[str, Any], file: Path | None) -> str:
        soup = _soup(html)
        changed = False

        for node in soup.find_all(string=_HASHTAG_RE):
            if not isinstance(node, NavigableString) or node.find_parent(_SKIP_TEXT_PARENTS):
                continue
            escaped = html_lib.escape(str(node), quote=False)
            linked = _HASHTAG_RE.sub(
                lambda m: f'{m.group(1)}<a href="{self.tag_url}{m.group(2)}">#{m.group(2)}</a>',
                escaped,
            )
            node.replace_with(_soup(linked))
            changed = True

        return str(soup) if changed else html


class ContentIncludesFilter(Filter):
    """Prepends/appends shared markdown and HTML snippets to every page.

    ``includes`` maps ``markdown_before``, ``markdown_after``, ``html_before``
    and ``html_after`` to file names, absolute or relative to the content root.
    """

    def __init__(self, includes: dict[str, tuple[str, ...]], content_dir: Path):
        self.includes = includes
        self.content_dir = Path(content_dir)

    def _read(self, key: str) -> list[str]:
        texts = []
        for ref in self.includes.get(key, ()):
            path = Path(ref)
            if not path.is_file():
                path = self.content_dir / str(ref).lstrip("/")
            if path.is_file():
                texts.append(path.read_text(encoding="utf-8"))
            else:
                logger.debug("Include not found: %s", ref)
        return texts

    def before(self, markdown: str, meta: dict[str, Any], file: Path | None) -> str:
        for text in self._read("markdown_before"):
            markdown = text + markdown
        for text in self._read("markdown_after"):
            markdown += text
        return markdown

    def after(self, html: str, meta: dict[str, Any], file: Path | None) -> str:
        for text in self._read("html_before"):
            html = text + html
        for text in self._read("html_after"):
            html += text
        return html


class AnchorFilter(Filter):
    """Rewrites links to content files into page URLs.

    Links that don't resolve to a page are handed to the resource resolver,
    if any, so plain files next to the page still get a public URL.
    """

    def __init__(self, index: ContentIndex, resolver: ResourceResolver | None = None):
        self.index = index
        self.resolver = resolver

    def _page_url(self, href: str, file: Path) -> str | None:
        target, hash_sep, fragment = href.partition("#")
        suffix = hash_sep + fragment

        page = self.index.get(target) if target.startswith("/") else None
        if page is None:
            absolute = (file.parent / target).resolve()
            content_dir = self.index.root_path.resolve()
            if absolute.is_relative_to(content_dir):
                page = self.index.get(absolute.relative_to(content_dir).as_posix())
        return page.url + suffix if page is not None else None

    def after(self, html: str, meta: dict[str, Any], file: Path | None) -> str:
        if file is None:
            return html

        soup = _soup(html)
        anchors = soup.find_all("a", href=True)
        if not anchors:
            return html

        for a in anchors:
            href = a["href"]
            if not href or is_url(href) or href.startswith("#"):
                continue
            url = self._page_url(href, file)
            if url is None and self.resolver is not None:
                url = self.resolver.resolve(href, file.parent)
            if url is not None:
                a["href"] = url
        return str(soup)


class ImageFilter(Filter):
    """Resolves relative image sources through a resource resolver."""

    def __init__(self, resolver: ResourceResolver):
        self.resolver = resolver

    def after(self, html: str, meta: dict[str, Any], file: Path | None) -> str:
        if file is None:
            return html

        soup = _soup(html)
        images = soup.find_all("img", src=True)
        if not images:
            return html

        for img in images:
            src = img["src"]
            if is_url(src):
                continue
            resolved = self.resolver.resolve(src, file.parent)
            if resolved:
                img["src"] = resolved
        return str(soup)


FilterFactory = Callable[[ContentConfig, "ContentIndex | None", ResourceResolver], Filter | None]

BUILTIN_FILTERS: dict[str, FilterFactory] = {
    "includes": lambda config, index, resolver: (
        ContentIncludesFilter(config.includes, config.content_dir) if config.includes else None
    ),
    "heading-offset": lambda config, index, resolver: HeadingOffsetFilter(config.heading_offset),
    "heading-id": lambda config, index, resolver: HeadingIdFilter(),
    "hashtags": lambda config, index, resolver: HashtagFilter(
        f"{config.root_url.rstrip('/')}/{config.tag_route.lstrip('/')}"
    ),
    "anchors": lambda config, index, resolver: (
        AnchorFilter(index, resolver) if index is not None else None
    ),
    "images": lambda config, index, resolver: ImageFilter(resolver),
}


def build_pipeline(
    config: ContentConfig,
    index: ContentIndex | None = None,
    resolver: ResourceResolver | None = None,
) -> FilterPipeline:
    """Build the filter pipeline named by ``config.filters``.

    Unknown names are logged and skipped.
    """
    if resolver is None:
        resolver = StaticResourceResolver(config.content_dir, config.root_url)

    pipeline = FilterPipeline()
    for name in config.filters:
        factory = BUILTIN_FILTERS.get(name)
        if factory is None:
            logger.warning("Unknown filter %r in configuration", name)
            continue
        flt = factory(config, index, resolver)
        if flt is not None:
            pipeline.add(name, flt)
    return pipeline
