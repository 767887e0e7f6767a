"""
URI and path helpers shared by the content index, router and menus.

All helpers work on "/"-separated strings rather than filesystem paths.
"""

from __future__ import annotations

import re
from urllib.parse import quote, unquote

_DOUBLE_SLASH_RE = re.compile(r"/{2,}")
_URL_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*:|//)")


def remove_double_slashes(uri: str) -> str:
    """Collapse runs of slashes into a single slash."""
    return _DOUBLE_SLASH_RE.sub("/", uri)


def canonicalize_path(uri: str) -> str:
    """Resolve "." and ".." segments, keeping leading and trailing slashes.

    Examples:
        "/a/./b/../c" -> "/a/c"
        "/a/b/../"    -> "/a/"
        "/../x"       -> "/x"
    """
    leading = uri.startswith("/")
    trailing = uri.endswith("/") or uri.endswith("/.") or uri.endswith("/..")

    parts: list[str] = []
    for segment in uri.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)

    result = "/".join(parts)
    if leading:
        result = "/" + result
    if trailing and parts:
        result += "/"
    return result or ("/" if leading else "")


def clean_uri(uri: str) -> str:
    """Ensure a leading slash, URL-decode, collapse slashes and canonicalize."""
    if not uri.startswith("/"):
        uri = "/" + uri
    return canonicalize_path(remove_double_slashes(unquote(uri)))


def split_basename(uri: str) -> tuple[str, str]:
    """Split a URI into (dirname, basename), ignoring a trailing slash.

    Examples:
        "/blog/_post" -> ("/blog", "_post")
        "/_post"      -> ("/", "_post")
        "/blog/"      -> ("/", "blog")
    """
    head, _, base = uri.rstrip("/").rpartition("/")
    return head or "/", base


def join_uri(dirname: str, basename: str) -> str:
    """Join a dirname and basename with exactly one slash."""
    return dirname.rstrip("/") + "/" + basename


def encode_route(route: str) -> str:
    """Percent-encode every segment of a route."""
    return "/".join(quote(part.strip(), safe="") for part in route.split("/"))


def is_url(ref: str) -> bool:
    """Check if a reference is an absolute or protocol-relative URL."""
    return bool(_URL_RE.match(ref))
