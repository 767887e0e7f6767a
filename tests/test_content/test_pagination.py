"""Tests for Pagination."""

import pytest

from folio.content.pagination import Pagination


@pytest.fixture
def pager():
    return Pagination(list(range(1, 24)), limit=10)


def test_first_page(pager):
    assert pager.page == 1
    assert pager.offset == 0
    assert pager.items == list(range(1, 11))
    assert pager.count == 3
    assert len(pager) == 3


def test_last_partial_page(pager):
    last = pager.get_last()

    assert last.page == 3
    assert last.items == [21, 22, 23]
    assert last.has_next() is False
    assert last.get_next() is None


def test_navigation(pager):
    second = pager.get_next()

    assert second.page == 2
    assert second.has_previous() is True
    assert second.get_previous().page == 1
    assert second.get_first().page == 1
    assert pager.has_previous() is False
    assert pager.get_previous() is None


def test_page_bounds(pager):
    assert pager.has_page(0) is False
    assert pager.has_page(3) is True
    assert pager.has_page(4) is False
    assert pager.get_page(4) is None
    assert Pagination([1, 2], 10, page=0).items == []
    assert Pagination([1, 2], 10, page=5).items == []


def test_iteration(pager):
    assert [p.page for p in pager] == [1, 2, 3]
    assert sum(len(p.items) for p in pager) == 23


def test_find(pager):
    assert pager.find(lambda p: 15 in p.items).page == 2
    assert pager.find(lambda p: 99 in p.items) is None


def test_empty():
    pager = Pagination([], 10)

    assert pager.count == 0
    assert pager.items == []
    assert pager.get_last().page == 1
    assert list(pager) == []


def test_exact_multiple():
    assert Pagination(range(20), 10).count == 2


def test_mapping_items():
    pager = Pagination({"/a": "A", "/b": "B", "/c": "C"}, 2)

    assert pager.items == ["A", "B"]
    assert pager.get_next().items == ["C"]


def test_limit_floor():
    assert Pagination([1, 2, 3], 0).limit == 1


@pytest.mark.parametrize(
    "current,expected",
    [
        ("/blog", "/blog?page=3"),
        ("/blog?page=1", "/blog?page=3"),
        ("/blog?tag=x&page=1", "/blog?page=3&tag=x"),
        ("https://example.com/blog?z=1", "https://example.com/blog?page=3&z=1"),
    ],
)
def test_url(pager, current, expected):
    assert pager.get_page(3).url(current) == expected
