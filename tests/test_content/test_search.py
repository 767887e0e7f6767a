"""Tests for full-text search."""

import pytest

from folio.content.page import _UNLOADED
from folio.content.search import TITLE_MATCH_RANK, Search, SearchResult


@pytest.fixture
def pages(index, blog):
    return index.pages()


def test_empty_query(pages):
    search = Search(pages, "   ")

    assert len(search) == 0
    assert search.results == []


def test_body_matches_ranked(pages):
    search = Search(pages, "python")

    assert [page.title for page in search] == ["First Post", "About Us"]
    assert search.rank_of("/blog/first") == pytest.approx(0.4)
    assert search.rank_of("/about") == pytest.approx(0.2)


def test_title_match_short_circuits(pages):
    search = Search(pages, "first post")

    assert search.pages[0].title == "First Post"
    assert search.results[0].rank == TITLE_MATCH_RANK
    assert all(result.rank < TITLE_MATCH_RANK for result in search.results[1:])


def test_title_match_is_case_insensitive(pages):
    assert Search(pages, "ABOUT US").rank_of("/about") == TITLE_MATCH_RANK


def test_accepts_list_of_pages(pages):
    search = Search(list(pages.values()), "markdown")

    assert {page.route for page in search} == {"/about", "/blog/second"}


def test_results_are_search_results(pages):
    result = Search(pages, "python").results[0]

    assert isinstance(result, SearchResult)
    assert result.page.route == "/blog/first"


def test_contains(pages):
    search = Search(pages, "python")

    assert "/blog/first" in search
    assert pages["/blog/first"] in search
    assert "/blog/second" not in search
    assert 42 not in search
    assert search.rank_of("/nowhere") == 0.0


def test_excludes(pages):
    search = Search(pages, "python", excludes=["blog/"])

    assert [page.route for page in search] == ["/about"]


def test_low_value_words_dropped_when_others_present(pages):
    plain = Search(pages, "python")
    with_stop = Search(pages, "the python", low_value=["the"])

    assert [r.rank for r in with_stop.results] == [r.rank for r in plain.results]


def test_non_matching_pages_are_unloaded(pages):
    Search(pages, "python")

    assert pages["/"]._fields["html"] is _UNLOADED


@pytest.mark.parametrize(
    "term,text,expected",
    [
        ("cache", "cache and cache", 2.0),
        ("cache", "cache cache cache cache cache", 3.0),
        ("cach", "caching cached", 1.0),
        ("ach", "caching", 0.05),
        ("CACHE", "Cache", 1.0),
        ("zzz", "caching", 0.0),
    ],
)
def test_rank_for_term(term, text, expected):
    assert Search([], "x").rank_for_term(term, text) == pytest.approx(expected)


def test_rank_for_low_value_term():
    search = Search([], "the", low_value=["the"])

    assert search.rank_for_term("the", "the cat and the dog") == pytest.approx(0.4)
    assert search.is_low_value("THE") is True


def test_rank_monotonic_in_occurrences(write_page, index):
    for count in range(1, 5):
        write_page(f"p{count}.md", {"title": f"Page {count}"}, "widget " * count + "\n")

    search = Search(index.pages(), "widget")
    ranks = [search.rank_of(f"/p{count}") for count in range(1, 5)]

    assert ranks == sorted(ranks)
    assert ranks[2] == ranks[3]


def test_summary_around_matches(pages):
    search = Search(pages, "python")

    assert search.get_summary("/blog/first", radius=10) == "Python is great. ... Python is fun."
    assert search.get_summary("/about", radius=10) == "... about python and..."


def test_summary_respects_max_excerpts(pages):
    search = Search(pages, "python")

    assert search.get_summary("/blog/first", radius=10, max_excerpts=1) == "Python is great...."


def test_summary_falls_back_to_lead_text(pages):
    search = Search(pages, "second post")

    assert search.get_summary("/blog/second") == "Caching markdown pages."


def test_summary_for_non_result(pages):
    assert Search(pages, "python").get_summary("/blog/second") is None


def test_summary_escapes_html(write_page, index):
    write_page("code.md", body="Use `a < b` in python code.\n")
    search = Search(index.pages(), "python")

    assert "a &lt; b" in search.get_summary("/code")


def test_highlight_terms():
    search = Search([], "py python")

    assert search.highlight_terms("Python and py") == (
        '<span class="highlight">Python</span> and <span class="highlight">py</span>'
    )
    assert Search([], "").highlight_terms("text") == "text"
