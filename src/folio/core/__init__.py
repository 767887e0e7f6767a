"""Core utilities for folio."""

from folio.core.config import ContentConfig, find_site_root, get_site_root, load_config
from folio.core.crypto import compute_text_hash
from folio.core.errors import (
    AlreadyExists,
    FolioError,
    MalformedFrontMatter,
    MarkdownCompileError,
    NotFound,
)
from folio.core.fileio import atomic_write_text, remove_file

__all__ = [
    # Config
    "ContentConfig",
    "find_site_root",
    "get_site_root",
    "load_config",
    # Crypto
    "compute_text_hash",
    # Errors
    "FolioError",
    "NotFound",
    "AlreadyExists",
    "MalformedFrontMatter",
    "MarkdownCompileError",
    # File I/O
    "atomic_write_text",
    "remove_file",
]
