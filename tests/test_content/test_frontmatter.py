"""Tests for front matter parsing and serialization."""

from datetime import datetime

import pytest

from folio.content.frontmatter import (
    FrontMatterParser,
    dump_block,
    parse_block,
    split_front_matter,
    to_bool,
    to_datetime,
    to_int,
)
from folio.core.errors import MalformedFrontMatter


@pytest.fixture
def parser():
    return FrontMatterParser(int_fields=("weight",), bool_fields=("featured",))


# ---------------------------------------------------------------------------
# split_front_matter()
# ---------------------------------------------------------------------------


def test_split_without_fence():
    split = split_front_matter("\n\nJust a body.\n")

    assert split.has_meta is False
    assert split.body == "Just a body.\n"


def test_split_yaml_fence():
    split = split_front_matter("---\ntitle: Hi\n---\n\n  Body\n")

    assert split.separator == "---"
    assert split.format == "yaml"
    assert split.block == "title: Hi\n"
    assert split.body == "Body\n"
    assert split.closed


def test_split_declared_format():
    split = split_front_matter('```json\n{"title": "Hi"}\n```\nBody')

    assert split.separator == "```"
    assert split.format == "json"
    assert split.body == "Body"


def test_split_dash_fence_with_format_token():
    split = split_front_matter("---ini\ntitle = Hi\n---\nBody")

    assert split.format == "ini"


def test_split_unterminated():
    text = "---\ntitle: Hi\nBody without closing fence\n"
    split = split_front_matter(text)

    assert split.closed is False
    assert split.body == text


# ---------------------------------------------------------------------------
# parse_block() / dump_block()
# ---------------------------------------------------------------------------


def test_parse_yaml_block():
    assert parse_block("title: Hi\ncount: 3\n") == {"title": "Hi", "count": 3}


def test_parse_json_block():
    assert parse_block('{"title": "Hi"}', "json") == {"title": "Hi"}


def test_parse_ini_block_with_sections():
    data = parse_block("title = Hi\n\n[social]\ntwitter = @me\n", "ini")

    assert data == {"title": "Hi", "social": {"twitter": "@me"}}


def test_parse_empty_block():
    assert parse_block("   \n") == {}


@pytest.mark.parametrize(
    "block,fmt",
    [
        (": [unclosed", "yaml"),
        ("{not json", "json"),
        ("- a list\n- not a mapping", "yaml"),
        ("x = 1", "toml"),
    ],
)
def test_parse_malformed_block(block, fmt):
    with pytest.raises(MalformedFrontMatter):
        parse_block(block, fmt)


def test_dump_block_formats():
    meta = {"title": "Hi", "tags": ["a", "b"]}

    assert "title: Hi" in dump_block(meta)
    assert '"title": "Hi"' in dump_block(meta, "json")
    assert "tags = a, b" in dump_block(meta, "ini")
    assert dump_block({}) == ""


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-03-01", datetime(2024, 3, 1)),
        ("2024-03-01 10:30", datetime(2024, 3, 1, 10, 30)),
        ("01.03.2024", datetime(2024, 3, 1)),
        (datetime(2024, 3, 1, 5), datetime(2024, 3, 1, 5)),
        ("not a date", None),
        (True, None),
    ],
)
def test_to_datetime(value, expected):
    assert to_datetime(value) == expected


def test_to_datetime_from_date():
    from datetime import date

    assert to_datetime(date(2024, 3, 1)) == datetime(2024, 3, 1)


@pytest.mark.parametrize("value,expected", [("yes", True), ("On", True), ("0", False), ("", False), (1, True)])
def test_to_bool(value, expected):
    assert to_bool(value) is expected


@pytest.mark.parametrize("value,expected", [("12", 12), ("3.7", 3), ("abc", 0), (None, 0), (5, 5)])
def test_to_int(value, expected):
    assert to_int(value) == expected


# ---------------------------------------------------------------------------
# FrontMatterParser
# ---------------------------------------------------------------------------


def test_normalize_lowercases_first_letter(parser):
    meta = parser.normalize({"Title": "Hi", "URLSlug": "x"})

    assert meta == {"title": "Hi", "uRLSlug": "x"}


def test_normalize_coerces_fields(parser):
    meta = parser.normalize(
        {
            "tags": "python, cache ,, markdown",
            "keywords": ["already", "list"],
            "published": "2024-01-02",
            "weight": "7",
            "featured": "yes",
            "other": "untouched",
        }
    )

    assert meta["tags"] == ["python", "cache", "markdown"]
    assert meta["keywords"] == ["already", "list"]
    assert meta["published"] == datetime(2024, 1, 2)
    assert meta["weight"] == 7
    assert meta["featured"] is True
    assert meta["other"] == "untouched"


def test_normalize_leaves_unparseable_dates(parser):
    assert parser.normalize({"published": "someday"})["published"] == "someday"


def test_parse_document(parser):
    doc = parser.parse("---\nTitle: Hello\ntags: a, b\n---\n\nBody text\n")

    assert doc.meta == {"title": "Hello", "tags": ["a", "b"]}
    assert doc.body == "Body text\n"
    assert doc.separator == "---"
    assert doc.format == "yaml"


def test_parse_without_meta(parser):
    doc = parser.parse("# Heading\n")

    assert doc.meta == {}
    assert doc.separator is None
    assert doc.body == "# Heading\n"


def test_parse_unterminated_raises(parser):
    with pytest.raises(MalformedFrontMatter, match="Unterminated"):
        parser.parse("---\ntitle: Hi\n")


def test_dump_yaml(parser):
    text = parser.dump({"title": "Hi"}, "Body\n")

    assert text == "---\ntitle: Hi\n---\n\nBody\n"


def test_dump_declares_non_yaml_format(parser):
    text = parser.dump({"title": "Hi"}, "Body", separator="```", fmt="json")

    assert text.startswith("```json\n")
    assert parser.parse(text).meta == {"title": "Hi"}


def test_dump_unsupported_format_falls_back_to_yaml(parser):
    text = parser.dump({"title": "Hi"}, "Body", fmt="toml")

    assert text.startswith("---\ntitle: Hi\n")


def test_dump_then_parse_keeps_meta_and_body(parser):
    meta = {"title": "Round", "tags": ["a", "b"], "published": datetime(2024, 5, 6, 7, 8)}

    doc = parser.parse(parser.dump(meta, "Some *markdown*\n"))

    assert doc.meta == meta
    assert doc.body == "Some *markdown*\n"


def test_from_config(config):
    parser = FrontMatterParser.from_config(config)

    assert parser.comma_list_fields == config.comma_list_fields
    assert parser.date_fields == config.date_fields
