"""Errors raised while scanning folders and reading file metadata."""


class ScanError(Exception):
    """Base exception for folder scanning."""


class DirectoryNotFoundError(ScanError, FileNotFoundError):
    """Raised when the folder to scan does not exist."""


class ExtractionError(Exception):
    """Raised when embedded metadata cannot be read from a single file."""
