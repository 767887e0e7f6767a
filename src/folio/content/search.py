"""
Full-text page search.

Pages are ranked against the query terms by where and how each term
matches:

  - the whole query as a word in the title ranks 5 and skips everything else
  - otherwise each term scores against the title, plus 0.2 times its score
    against the page text
  - a term scores 1 per whole-word match, 0.5 per word-prefix match or 0.05
    per substring match (first tier that matches wins, capped at 3 matches)
  - low-value words only count when the query has nothing else, at 0.2 weight
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from folio.content.page import Page

logger = logging.getLogger(__name__)

TITLE_MATCH_RANK = 5.0
MAX_MATCHES = 3
PREFIX_WEIGHT = 0.5
SUBSTRING_WEIGHT = 0.05
LOW_VALUE_WEIGHT = 0.2
BODY_WEIGHT = 0.2

# Characters an excerpt may start or end next to
_BOUNDARY = r"\s\x00-/:-@\[-`{-~"


@dataclass(frozen=True)
class SearchResult:
    """A page and its search rank."""

    page: Page
    rank: float


class Search:
    """Ranked search over a set of pages.

    Args:
        pages: Candidate pages (a list, or a route to page mapping)
        terms: Whitespace separated query
        excludes: Relative path prefixes to leave out
        low_value: Stop words that only weakly count toward a rank
    """

    def __init__(
        self,
        pages: Iterable[Page] | Mapping[str, Page],
        terms: str,
        excludes: Iterable[str] = (),
        low_value: Iterable[str] = (),
    ):
        self.terms = (terms or "").strip()
        self.words = self.terms.split()
        self.excludes = [path.lstrip("/") for path in excludes if path]
        self.low_value = {word.lower() for word in low_value}
        self._results: list[SearchResult] = []

        if not self.words:
            return

        candidates = pages.values() if isinstance(pages, Mapping) else pages
        for page in candidates:
            if self._excluded(page):
                continue
            rank = self.rank(page)
            if rank > 0:
                self._results.append(SearchResult(page, rank))
            else:
                page.unload()

        self._results.sort(key=lambda result: result.rank, reverse=True)
        logger.debug("Search %r matched %d pages", self.terms, len(self._results))

    def _excluded(self, page: Page) -> bool:
        relative = page.relative_path.lstrip("/")
        return any(relative.startswith(path) for path in self.excludes)

    def is_low_value(self, word: str) -> bool:
        return word.lower() in self.low_value

    def rank(self, page: Page) -> float:
        """Rank a page against the query (0 means no match)."""
        title = page.title or ""
        if re.search(rf"\b{re.escape(self.terms)}\b", title, re.IGNORECASE):
            return TITLE_MATCH_RANK

        terms = [word for word in self.words if not self.is_low_value(word)] or self.words
        text = page.bare
        return sum(
            self.rank_for_term(term, title) + self.rank_for_term(term, text) * BODY_WEIGHT
            for term in terms
        )

    def rank_for_term(self, term: str, text: str) -> float:
        """Score one term against one text."""
        text = text.replace("\r\n", " ").replace("\n", " ")
        weight = LOW_VALUE_WEIGHT if self.is_low_value(term) else 1.0
        escaped = re.escape(term)

        whole = len(re.findall(rf"\b{escaped}\b", text, re.IGNORECASE))
        if whole:
            return min(whole, MAX_MATCHES) * weight

        prefix = len(re.findall(rf"\b{escaped}\B", text, re.IGNORECASE))
        if prefix:
            return min(prefix, MAX_MATCHES) * PREFIX_WEIGHT * weight

        anywhere = len(re.findall(escaped, text, re.IGNORECASE))
        return min(anywhere, MAX_MATCHES) * SUBSTRING_WEIGHT * weight

    # Result access

    @property
    def results(self) -> list[SearchResult]:
        return list(self._results)

    @property
    def pages(self) -> list[Page]:
        return [result.page for result in self._results]

    def __iter__(self) -> Iterator[Page]:
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self._results)

    def _find(self, page: Page | str) -> SearchResult | None:
        page_id = page.id if isinstance(page, Page) else page
        return next((r for r in self._results if r.page.id == page_id), None)

    def __contains__(self, page: object) -> bool:
        return isinstance(page, (Page, str)) and self._find(page) is not None

    def rank_of(self, page: Page | str) -> float:
        result = self._find(page)
        return result.rank if result is not None else 0.0

    # Presentation

    def _terms_pattern(self) -> str:
        words = sorted(self.words, key=len, reverse=True)
        return "|".join(re.escape(word) for word in words)

    def get_summary(
        self,
        page: Page | str,
        radius: int = 50,
        max_excerpts: int = 10,
        delimiter: str = " ... ",
    ) -> str | None:
        """Excerpts of a result page's text around the query terms.

        Each excerpt reaches up to ``radius`` characters either side of a
        match and is cut at whitespace or punctuation. Ellipses mark text
        left out at either end.

        Returns:
            HTML-escaped summary, or None if the page isn't a result
        """
        result = self._find(page)
        if result is None:
            return None

        bare = result.page.bare
        pattern = re.compile(
            rf"(?:^|(?<=[{_BOUNDARY}])).{{0,{radius}}}"
            rf"(?:(?:{self._terms_pattern()}).{{0,{radius}}})+"
            rf"(?=[{_BOUNDARY}]|$)",
            re.IGNORECASE | re.DOTALL,
        )

        matches = []
        for match in pattern.finditer(bare):
            if match.group(0).strip():
                matches.append(match)
            if len(matches) >= max_excerpts:
                break

        if not matches:
            lead = bare[: radius * 2]
            if len(lead) < len(bare):
                lead = lead.rsplit(" ", 1)[0] + "..."
            return _clean_excerpt(lead)

        summary = delimiter.join(_clean_excerpt(m.group(0)) for m in matches)
        if matches[0].start() > 0:
            summary = "... " + summary
        if matches[-1].end() < len(bare):
            summary += "..."
        return summary

    def highlight_terms(self, text: str) -> str:
        """Wrap every occurrence of a query term in a highlight span."""
        if not self.words:
            return text
        return re.sub(
            self._terms_pattern(),
            lambda m: f'<span class="highlight">{m.group(0)}</span>',
            text,
            flags=re.IGNORECASE,
        )


def _clean_excerpt(text: str) -> str:
    text = html.escape(text, quote=False).replace("\xa0", " ")
    return re.sub(r"\s+", " ", text).strip()
