"""
Configuration and path management.

Provides site root detection and the content configuration for a folio site.
Settings live in a folio.yaml file at the site root.

Resolution order for site root:
  1. FOLIO_SITE_ROOT environment variable (highest priority)
  2. Walk up from cwd looking for folio.yaml
  3. Global config file (~/.config/folio/config.yaml) site_root key
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "folio.yaml"


@dataclass(frozen=True)
class ContentConfig:
    """Settings shared by the content index, pages and cache."""

    site_root: Path
    content_dir: Path
    cache_dir: Path

    root_url: str = ""
    extension: str = "md"
    meta_extension: str = "yml"
    html_extension: str = "html"

    # Filename conventions
    draft_marker: str = "_"
    hidden_marker: str = "_"
    template_name: str = "default.md"

    # Cache behaviour
    cache_enabled: bool = True
    ignore_mtime: bool = False

    drafts_enabled: bool = False
    strict: bool = False

    # Front matter coercion
    comma_list_fields: tuple[str, ...] = ("keywords", "tags")
    date_fields: tuple[str, ...] = ("published", "updated")
    int_fields: tuple[str, ...] = ()
    bool_fields: tuple[str, ...] = ()

    author: str | None = None
    language: str = "en_US"

    # Search
    search_exclude: tuple[str, ...] = ()
    search_low_value: tuple[str, ...] = ()

    pagination: int = 10
    tag_route: str = "tags/"
    heading_offset: int = 0
    includes: dict[str, tuple[str, ...]] = field(default_factory=dict)
    markdown_extensions: tuple[str, ...] = ("extra",)
    filters: tuple[str, ...] = ("includes", "heading-offset", "heading-id", "anchors", "images")
    menus_file: str = "menus.yml"

    @classmethod
    def from_dict(cls, site_root: Path, data: dict[str, Any]) -> ContentConfig:
        """Build a config from a parsed folio.yaml mapping.

        Args:
            site_root: Directory the relative paths are resolved against
            data: Parsed settings (unknown keys are ignored)

        Returns:
            ContentConfig instance
        """
        site_root = Path(site_root)
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}

        for key, value in data.items():
            name = key.replace("-", "_")
            if name not in known or name in ("site_root", "content_dir", "cache_dir"):
                continue
            if isinstance(value, list):
                value = tuple(value)
            if name == "includes" and isinstance(value, dict):
                value = {
                    k.replace("-", "_"): tuple(v) if isinstance(v, list) else (v,)
                    for k, v in value.items()
                    if v
                }
            kwargs[name] = value

        content_dir = Path(data.get("content_dir") or data.get("content-dir") or "content")
        cache_dir = Path(data.get("cache_dir") or data.get("cache-dir") or ".folio/cache")
        if not content_dir.is_absolute():
            content_dir = site_root / content_dir
        if not cache_dir.is_absolute():
            cache_dir = site_root / cache_dir

        return cls(
            site_root=site_root,
            content_dir=content_dir,
            cache_dir=cache_dir,
            **kwargs,
        )


def get_global_config_path() -> Path:
    """Return the path to the global folio config file.

    Respects XDG_CONFIG_HOME if set, otherwise defaults to ~/.config/folio/config.yaml.

    Returns:
        Path to global config file (may not exist).
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "folio" / "config.yaml"


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    """Load a YAML file that should contain a mapping.

    Returns:
        Parsed dict, or empty dict if the file is missing or invalid.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def load_global_config() -> dict[str, Any]:
    """Load the global folio configuration."""
    return _load_yaml_mapping(get_global_config_path())


def _walk_up_for_config(start_path: Path) -> Path | None:
    """Walk up directory tree looking for folio.yaml.

    Args:
        start_path: Starting path for search.

    Returns:
        Directory containing folio.yaml, or None if not found.
    """
    current = start_path.resolve()
    while current != current.parent:
        if (current / CONFIG_FILENAME).is_file():
            return current
        current = current.parent
    return None


def find_site_root(start_path: Path | None = None) -> Path:
    """Find the site root using 3-tier resolution.

    Args:
        start_path: Starting path for the folio.yaml walk (defaults to cwd)

    Returns:
        Path to site root

    Raises:
        FileNotFoundError: If no site root can be determined
    """
    env_root = os.environ.get("FOLIO_SITE_ROOT")
    if env_root:
        env_path = Path(env_root).resolve()
        if env_path.is_dir():
            return env_path
        raise FileNotFoundError(f"FOLIO_SITE_ROOT={env_root} is not a directory.")

    if start_path is None:
        start_path = Path.cwd()
    result = _walk_up_for_config(Path(start_path))
    if result is not None:
        return result

    site_root_str = load_global_config().get("site_root")
    if site_root_str:
        global_path = Path(site_root_str).expanduser().resolve()
        if global_path.is_dir():
            return global_path
        raise FileNotFoundError(
            f"Global config site_root={site_root_str} is not a directory."
        )

    raise FileNotFoundError(
        f"Could not find {CONFIG_FILENAME} starting from {start_path}. "
        f"Set FOLIO_SITE_ROOT or configure site_root in {get_global_config_path()}."
    )


@lru_cache(maxsize=1)
def get_site_root() -> Path:
    """Get the cached site root path."""
    return find_site_root()


def load_config(site_root: Path | None = None) -> ContentConfig:
    """Load the content configuration for a site.

    Args:
        site_root: Site root path (uses cached default if not provided)

    Returns:
        ContentConfig for the site
    """
    if site_root is None:
        site_root = get_site_root()
    site_root = Path(site_root)
    return ContentConfig.from_dict(site_root, _load_yaml_mapping(site_root / CONFIG_FILENAME))
