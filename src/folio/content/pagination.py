"""Page-numbered slices of a result list."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


class Pagination:
    """One page of a list of items.

    Pages are numbered from 1. Iterating yields a Pagination for every page.
    """

    def __init__(self, items: Iterable[Any] | Mapping[str, Any], limit: int, page: int = 1):
        self.all = list(items.values() if isinstance(items, Mapping) else items)
        self.limit = max(1, int(limit))
        self.page = int(page)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def items(self) -> list[Any]:
        if self.page < 1:
            return []
        return self.all[self.offset : self.offset + self.limit]

    @property
    def count(self) -> int:
        """Number of pages."""
        return math.ceil(len(self.all) / self.limit)

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Pagination]:
        for index in range(1, self.count + 1):
            yield Pagination(self.all, self.limit, index)

    def __repr__(self) -> str:
        return f"Pagination(page={self.page}, count={self.count}, limit={self.limit})"

    def has_page(self, index: int) -> bool:
        return 1 <= index <= self.count

    def get_page(self, index: int) -> Pagination | None:
        return Pagination(self.all, self.limit, index) if self.has_page(index) else None

    def has_previous(self) -> bool:
        return self.has_page(self.page - 1)

    def get_previous(self) -> Pagination | None:
        return self.get_page(self.page - 1)

    def has_next(self) -> bool:
        return self.has_page(self.page + 1)

    def get_next(self) -> Pagination | None:
        return self.get_page(self.page + 1)

    def get_first(self) -> Pagination:
        return Pagination(self.all, self.limit, 1)

    def get_last(self) -> Pagination:
        return Pagination(self.all, self.limit, max(self.count, 1))

    def find(self, predicate: Callable[[Pagination], bool]) -> Pagination | None:
        """First page for which ``predicate`` is true."""
        return next((page for page in self if predicate(page)), None)

    def url(self, current: str) -> str:
        """``current`` with its ``page`` query parameter set to this page.

        Example:
            "/blog?tag=x&page=1" -> "/blog?page=3&tag=x"  (on page 3)
        """
        parts = urlsplit(current)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))
        query["page"] = str(self.page)
        return urlunsplit(parts._replace(query=urlencode(sorted(query.items()))))
