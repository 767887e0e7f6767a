"""Exception taxonomy for folio."""

from __future__ import annotations


class FolioError(Exception):
    """Base class for all folio errors."""


class NotFound(FolioError, FileNotFoundError):
    """A required source file does not exist."""


class AlreadyExists(FolioError, FileExistsError):
    """Refusing to create a file that is already on disk."""


class MalformedFrontMatter(FolioError, ValueError):
    """The metadata block could not be parsed."""


class MarkdownCompileError(FolioError):
    """The markdown compiler failed on a document."""
