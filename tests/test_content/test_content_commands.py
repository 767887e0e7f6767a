"""Tests for content CLI commands."""

import pytest
import yaml
from click.testing import CliRunner

from folio.content import commands as content_commands
from folio.content.commands import content


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(content_commands.console, "width", 200)


# ---------------------------------------------------------------------------
# compile
# ---------------------------------------------------------------------------


def test_compile_all(runner, blog):
    result = runner.invoke(content, ["compile"])

    assert result.exit_code == 0
    assert "Processing 6 page(s)" in result.output
    assert "Compiled 6 page(s)" in result.output


def test_compile_skips_fresh_pages(runner, blog):
    runner.invoke(content, ["compile"])

    result = runner.invoke(content, ["compile"])

    assert result.exit_code == 0
    assert "Compiled 0 page(s)" in result.output
    assert "Skipped 6 page(s)" in result.output


def test_compile_force(runner, blog):
    runner.invoke(content, ["compile"])

    result = runner.invoke(content, ["compile", "--force"])

    assert "Compiled 6 page(s)" in result.output


def test_compile_dry_run(runner, blog, index):
    from folio.cli import Context

    result = runner.invoke(content, ["compile"], obj=Context(dry_run=True))

    assert result.exit_code == 0
    assert "Compiling /blog/first" in result.output
    assert "Compiled 6 page(s)" in result.output
    page = index.get("/blog/first")
    assert not index.factory.cache.artifact(page.hashid).exists


def test_compile_single_page(runner, blog, index):
    result = runner.invoke(content, ["compile", "blog/first"])

    assert result.exit_code == 0
    assert "Compiling /blog/first" in result.output
    page = index.get("/blog/first")
    assert index.factory.cache.artifact(page.hashid).exists


def test_compile_single_draft(runner, blog):
    result = runner.invoke(content, ["compile", "/blog/draft-post"])

    assert result.exit_code == 0
    assert "Compiling /blog/_draft-post" in result.output


def test_compile_unknown_page(runner, blog):
    result = runner.invoke(content, ["compile", "nope"])

    assert result.exit_code == 1
    assert "Couldn't find 'nope'" in result.output


# ---------------------------------------------------------------------------
# routes
# ---------------------------------------------------------------------------


def test_routes(runner, blog):
    result = runner.invoke(content, ["routes"])

    assert result.exit_code == 0
    public, drafts = result.output.split("Draft routes:")
    assert "/blog/first" in public
    assert "/blog/draft-post" not in public
    assert "/blog/draft-post" in drafts


def test_routes_without_drafts(runner, write_page):
    write_page("index.md")

    result = runner.invoke(content, ["routes"])

    assert "none" in result.output.split("Draft routes:")[1]


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


def test_search(runner, blog):
    result = runner.invoke(content, ["search", "python", "--no-summary"])

    assert result.exit_code == 0
    assert "First Post" in result.output
    assert "About Us" in result.output
    assert "Second Post" not in result.output
    assert result.output.index("First Post") < result.output.index("About Us")


def test_search_limit(runner, blog):
    result = runner.invoke(content, ["search", "python", "-n", "1", "--no-summary"])

    assert "About Us" not in result.output
    assert "1 more result(s) not shown" in result.output


def test_search_with_summary(runner, blog):
    result = runner.invoke(content, ["search", "markdown"])

    assert result.exit_code == 0
    assert "Summary" in result.output


def test_search_no_results(runner, blog):
    result = runner.invoke(content, ["search", "zzzz"])

    assert result.exit_code == 0
    assert "No results for 'zzzz'" in result.output


# ---------------------------------------------------------------------------
# new
# ---------------------------------------------------------------------------


def test_new_page(runner, site_root, content_dir):
    result = runner.invoke(content, ["new", "blog/hello", "--title", "Hello"])

    assert result.exit_code == 0
    assert "Created:" in result.output
    text = (content_dir / "blog" / "hello.md").read_text()
    assert yaml.safe_load(text.split("---")[1]) == {"title": "Hello"}


def test_new_draft(runner, site_root, content_dir):
    result = runner.invoke(content, ["new", "blog/wip.md", "--draft"])

    assert result.exit_code == 0
    assert (content_dir / "blog" / "_wip.md").exists()
    assert "Route: /blog/wip" in result.output


def test_new_uses_template(runner, write_page, content_dir):
    write_page("blog/default.md", {"layout": "post"}, "Write here.\n")

    runner.invoke(content, ["new", "blog/a"])
    runner.invoke(content, ["new", "blog/b", "--no-template"])

    assert "layout: post" in (content_dir / "blog" / "a.md").read_text()
    assert "layout" not in (content_dir / "blog" / "b.md").read_text()


def test_new_existing(runner, blog):
    result = runner.invoke(content, ["new", "about"])

    assert result.exit_code == 1
    assert "Page already exists" in result.output


def test_new_dry_run(runner, site_root, content_dir):
    from folio.cli import Context

    result = runner.invoke(content, ["new", "post"], obj=Context(dry_run=True))

    assert result.exit_code == 0
    assert "Would create post.md" in result.output
    assert not (content_dir / "post.md").exists()


# ---------------------------------------------------------------------------
# menu
# ---------------------------------------------------------------------------


def test_menu(runner, blog, content_dir):
    (content_dir / "menus.yml").write_text(
        yaml.safe_dump({"main": [{"page": "/"}, {"label": "Posts", "list": "blog/"}]})
    )

    result = runner.invoke(content, ["menu", "main"])

    assert result.exit_code == 0
    for label in ("main", "Home", "Posts", "First Post", "Second Post"):
        assert label in result.output


def test_menu_unknown(runner, blog):
    result = runner.invoke(content, ["menu", "footer"])

    assert result.exit_code == 0
    assert "empty or not defined" in result.output
