"""Rendering cache for compiled pages."""

from folio.cache.store import CacheArtifact, CacheStore

__all__ = ["CacheStore", "CacheArtifact"]
