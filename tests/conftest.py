"""Shared test fixtures for folio package."""

from pathlib import Path

import pytest
import yaml


def page_text(meta: dict | None = None, body: str = "Test content.\n") -> str:
    """Render a content file with a YAML front matter block."""
    if not meta:
        return body
    fm_str = yaml.safe_dump(meta, default_flow_style=False, sort_keys=False)
    return f"---\n{fm_str}---\n\n{body}"


@pytest.fixture
def site_root(tmp_path, monkeypatch):
    """Create a site with folio.yaml and an empty content directory."""
    (tmp_path / "content").mkdir()
    (tmp_path / "folio.yaml").write_text(
        yaml.safe_dump({"root_url": "https://example.com", "drafts_enabled": True})
    )

    from folio.core import config

    # Clear the lru_cache first
    config.get_site_root.cache_clear()
    monkeypatch.setattr(config, "get_site_root", lambda: tmp_path)
    monkeypatch.delenv("FOLIO_SITE_ROOT", raising=False)

    return tmp_path


@pytest.fixture
def content_dir(site_root):
    return site_root / "content"


@pytest.fixture
def write_page(content_dir):
    """Factory fixture writing a content file below the content directory."""

    def _write(rel: str, meta: dict | None = None, body: str = "Test content.\n", text: str | None = None) -> Path:
        path = content_dir / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text if text is not None else page_text(meta, body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config(site_root):
    from folio.core.config import load_config

    return load_config(site_root)


@pytest.fixture
def make_config(site_root):
    """Factory fixture for configs with overridden settings."""
    from folio.core.config import ContentConfig

    def _make(**overrides):
        data = {"root_url": "https://example.com", "drafts_enabled": True}
        data.update(overrides)
        return ContentConfig.from_dict(site_root, data)

    return _make


@pytest.fixture
def index(config):
    from folio.content.index import ContentIndex

    return ContentIndex(config)


@pytest.fixture
def factory(index):
    return index.factory


@pytest.fixture
def blog(write_page):
    """A small site: home, about, a blog with posts and a draft."""
    write_page("index.md", {"title": "Home"}, "Welcome home.\n")
    write_page("about.md", {"title": "About Us"}, "We write about python and markdown.\n")
    write_page("blog/index.md", {"title": "Blog"}, "All posts.\n")
    write_page(
        "blog/first.md",
        {"title": "First Post", "published": "2020-01-01", "tags": "python, cache"},
        "Python is great. Python is fun.\n",
    )
    write_page(
        "blog/second.md",
        {"title": "Second Post", "published": "2021-06-01"},
        "Caching markdown pages.\n",
    )
    write_page(
        "blog/_draft-post.md",
        {"title": "Draft Post", "published": "2999-01-01"},
        "Not ready yet.\n",
    )
    return write_page
