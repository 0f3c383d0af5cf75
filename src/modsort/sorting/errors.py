"""Errors raised by the sorting pipeline."""


class SortError(Exception):
    """Base exception for sorting runs."""


class SourceNotFoundError(SortError):
    """Raised when the mods directory does not exist."""


class CollectionError(SortError):
    """Raised when mod metadata cannot be read from the host."""


class ArchiveWriteError(SortError):
    """Raised when a source file cannot be read or an archive cannot be written."""


class PathResolutionError(SortError):
    """Raised when no free archive filename is found within the configured bound."""
