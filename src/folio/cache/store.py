"""
On-disk rendering cache.

Each page owns two artifacts under the cache directory, both named by the
page hashid: ``{hashid}.{meta_ext}`` holds the compiled metadata as YAML and
``{hashid}.{html_ext}`` the rendered HTML. Artifacts are valid while both
exist and (unless mtime checks are disabled) the HTML artifact is at least as
new as the source file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from folio.core.config import ContentConfig
from folio.core.fileio import atomic_write_text, remove_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheArtifact:
    """The pair of cache files belonging to one page."""

    hashid: str
    meta_path: Path
    html_path: Path

    @property
    def exists(self) -> bool:
        return self.meta_path.is_file() and self.html_path.is_file()


class CacheStore:
    """Reads, writes and validates page cache artifacts."""

    def __init__(
        self,
        cache_dir: Path,
        meta_extension: str = "yml",
        html_extension: str = "html",
        ignore_mtime: bool = False,
    ):
        self.cache_dir = Path(cache_dir)
        self.meta_extension = meta_extension
        self.html_extension = html_extension
        self.ignore_mtime = ignore_mtime

    @classmethod
    def from_config(cls, config: ContentConfig) -> CacheStore:
        return cls(
            config.cache_dir,
            meta_extension=config.meta_extension,
            html_extension=config.html_extension,
            ignore_mtime=config.ignore_mtime,
        )

    def artifact(self, hashid: str) -> CacheArtifact:
        return CacheArtifact(
            hashid=hashid,
            meta_path=self.cache_dir / f"{hashid}.{self.meta_extension}",
            html_path=self.cache_dir / f"{hashid}.{self.html_extension}",
        )

    def is_valid(
        self,
        hashid: str,
        source_path: Path,
        ignore_mtime: bool | None = None,
    ) -> bool:
        """Check whether the artifacts for a page can be used.

        Args:
            hashid: Page hashid
            source_path: Source file the artifacts were compiled from
            ignore_mtime: Override the store's mtime policy

        Returns:
            True if both artifacts exist and are fresh enough
        """
        if ignore_mtime is None:
            ignore_mtime = self.ignore_mtime

        artifact = self.artifact(hashid)
        if not artifact.exists:
            return False
        if ignore_mtime:
            return True

        try:
            return Path(source_path).stat().st_mtime <= artifact.html_path.stat().st_mtime
        except FileNotFoundError:
            return False

    def read_meta(self, hashid: str) -> dict[str, Any]:
        """Read cached metadata.

        Raises:
            OSError: If the artifact can't be read
            yaml.YAMLError: If the artifact is corrupt
        """
        text = self.artifact(hashid).meta_path.read_text(encoding="utf-8")
        data = yaml.safe_load(text)
        return data if isinstance(data, dict) else {}

    def read_html(self, hashid: str) -> str:
        return self.artifact(hashid).html_path.read_text(encoding="utf-8")

    def write(self, hashid: str, meta: dict[str, Any], html: str) -> CacheArtifact:
        """Persist both artifacts atomically.

        The metadata file is written first so a valid HTML artifact always
        has its metadata next to it.

        Raises:
            OSError: If either file can't be written
            yaml.YAMLError: If the metadata can't be serialized
        """
        artifact = self.artifact(hashid)
        meta_text = yaml.safe_dump(
            meta, default_flow_style=False, allow_unicode=True, sort_keys=False
        )
        atomic_write_text(artifact.meta_path, meta_text)
        atomic_write_text(artifact.html_path, html)
        logger.debug("Cached %s", hashid)
        return artifact

    def clear(self, hashid: str) -> bool:
        """Remove both artifacts of a page.

        Returns:
            True if anything was removed
        """
        artifact = self.artifact(hashid)
        removed_meta = remove_file(artifact.meta_path)
        removed_html = remove_file(artifact.html_path)
        return removed_meta or removed_html

    def hashids(self) -> set[str]:
        """All hashids that have at least one artifact on disk."""
        if not self.cache_dir.is_dir():
            return set()
        suffixes = {f".{self.meta_extension}", f".{self.html_extension}"}
        return {
            path.stem
            for path in self.cache_dir.iterdir()
            if path.is_file() and path.suffix in suffixes
        }

    def sweep(self, live_hashids: Iterable[str]) -> list[str]:
        """Remove artifacts whose page no longer exists.

        Args:
            live_hashids: Hashids of all pages currently in the content tree

        Returns:
            Sorted list of removed hashids
        """
        live = set(live_hashids)
        orphans = sorted(self.hashids() - live)
        for hashid in orphans:
            self.clear(hashid)
        if orphans:
            logger.info("Swept %d orphaned cache entries", len(orphans))
        return orphans

    def purge(self) -> int:
        """Remove every artifact in the cache directory.

        Returns:
            Number of pages whose artifacts were removed
        """
        hashids = self.hashids()
        for hashid in hashids:
            self.clear(hashid)
        return len(hashids)
