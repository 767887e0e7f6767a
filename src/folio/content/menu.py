"""
Navigation menus.

A menu definition is a list of items, usually loaded from YAML:

    - label: Home
      page: /
    - label: Blog
      list: blog/
      sort: published
      order: desc
      limit: 5
    - label: About
      children:
        - page: about/team
        - label: Source
          url: https://example.com/source

``page`` links a single page, ``list`` expands to the pages below a directory
(flat, or as a tree when ``depth`` is more than 1) and ``children`` nests
items. Any other keys are kept as node attributes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from folio.content.index import ContentIndex
from folio.content.page import Page

logger = logging.getLogger(__name__)

_NODE_FIELDS = ("label", "url", "route")
_ITEM_KEYS = ("page", "list", "children", "sort", "order", "depth", "flat", "limit") + _NODE_FIELDS


@dataclass
class MenuNode:
    """One menu entry."""

    label: str | None = None
    url: str | None = None
    route: str | None = None
    children: list[MenuNode] = field(default_factory=list)
    attrs: dict[str, Any] = field(default_factory=dict)
    page: Page | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_page(cls, page: Page, label: str | None = None) -> MenuNode:
        return cls(label=label or page.title, url=page.url, route=page.route, page=page)

    def sort_value(self, key: str) -> Any:
        if key in _NODE_FIELDS:
            return getattr(self, key)
        if self.page is not None:
            return self.page.get(key)
        return self.attrs.get(key)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"label": self.label, "url": self.url, "route": self.route}
        data.update(self.attrs)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class _Branch:
    page: Page | None = None
    children: dict[str, _Branch] = field(default_factory=dict)


def sort_nodes(nodes: list[MenuNode], key: str | None, order: str = "asc") -> list[MenuNode]:
    """Stable sort of sibling nodes by a node field or page value."""
    if not key:
        return list(nodes)

    reverse = str(order).lower().startswith("desc")

    def sort_key(node: MenuNode) -> tuple[bool, Any]:
        value = node.sort_value(key)
        return (value is None, value)

    try:
        return sorted(nodes, key=sort_key, reverse=reverse)
    except TypeError:
        # Mixed value types; fall back to comparing their text
        return sorted(
            nodes,
            key=lambda node: (node.sort_value(key) is None, str(node.sort_value(key))),
            reverse=reverse,
        )


class MenuBuilder:
    """Builds menu trees from definitions, resolving pages through an index."""

    def __init__(self, index: ContentIndex):
        self.index = index

    def load(self, path: Path | str, name: str | None = None) -> list[dict[str, Any]]:
        """Load a menu definition from a YAML file.

        Args:
            path: YAML file holding either a list of items or named menus
            name: Menu to pick when the file holds several

        Raises:
            OSError: If the file can't be read
            ValueError: If the file doesn't hold a list of items
        """
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if name is not None and isinstance(data, dict):
            data = data.get(name)
        if not isinstance(data, list):
            raise ValueError(f"Menu definition must be a list of items: {path}")
        return data

    def build(self, definition: list[dict[str, Any]] | Path | str) -> list[MenuNode]:
        """Convert a menu definition into nodes.

        Args:
            definition: List of item mappings, or a path to a YAML file
        """
        if isinstance(definition, (str, Path)):
            definition = self.load(definition)
        return [self.build_item(item) for item in definition]

    def _link(self, node: MenuNode, ref: str) -> None:
        page = self.index.get(str(ref))
        if page is None:
            logger.debug("Menu item references unknown page %r", ref)
            return
        node.url = page.url
        node.route = page.route
        node.label = node.label or page.title
        node.page = page

    def build_item(self, item: dict[str, Any]) -> MenuNode:
        node = MenuNode(
            label=item.get("label"),
            url=item.get("url"),
            route=item.get("route"),
            attrs={k: v for k, v in item.items() if k not in _ITEM_KEYS},
        )

        if "page" in item:
            self._link(node, item["page"])
        elif "list" in item:
            self._link(node, item["list"])
            node.children = self.list_children(
                item["list"],
                sort=item.get("sort"),
                order=item.get("order", "asc"),
                depth=int(item.get("depth", 1)),
                flat=bool(item.get("flat", False)),
            )
            if item.get("limit") is not None:
                node.children = node.children[: int(item["limit"])]
        elif "children" in item:
            node.children = [self.build_item(child) for child in item["children"] or []]

        return node

    def list_children(
        self,
        uri: str,
        sort: str | None = None,
        order: str = "asc",
        depth: int = 1,
        flat: bool = False,
    ) -> list[MenuNode]:
        """Nodes for the pages below a directory."""
        pages = self.index.query(uri, depth)
        if flat or depth == 1:
            return sort_nodes([MenuNode.from_page(page) for page in pages.values()], sort, order)
        return self.hierarchy(pages, sort, order)

    def hierarchy(
        self,
        pages: dict[str, Page],
        sort: str | None = None,
        order: str = "asc",
    ) -> list[MenuNode]:
        """Nest a flat route to page mapping into a tree.

        Leading segments shared by every route are dropped so the tree doesn't
        start with empty levels. A page whose route ends at a branch (or in
        ``index``) becomes that branch's own link.
        """
        split = {route: [s for s in route.split("/") if s] for route in pages}
        if not split:
            return []

        shortest = min(len(segments) for segments in split.values())
        common = 0
        for column in zip(*split.values()):
            if common >= shortest - 1 or any(s != column[0] for s in column):
                break
            common += 1

        root = _Branch()
        for route, page in pages.items():
            segments = split[route][common:]
            if segments and segments[-1] == "index":
                segments = segments[:-1]
            if not segments:
                continue

            branch = root
            for segment in segments:
                branch = branch.children.setdefault(segment, _Branch())
            if branch.page is None:
                branch.page = page

        return sort_nodes(
            [self._convert(name, branch, sort, order) for name, branch in root.children.items()],
            sort,
            order,
        )

    def _convert(self, name: str, branch: _Branch, sort: str | None, order: str) -> MenuNode:
        if branch.page is not None:
            node = MenuNode.from_page(branch.page)
        else:
            node = MenuNode(label=name)

        node.children = sort_nodes(
            [self._convert(child, sub, sort, order) for child, sub in branch.children.items()],
            sort,
            order,
        )
        return node
