"""Helpers that strip characters which are invalid inside file and folder names."""

from __future__ import annotations

# Characters rejected by Windows, macOS or common Linux filesystems.
INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*' + "".join(chr(code) for code in range(32)))
_INVALID_PATH_CHARS = INVALID_FILENAME_CHARS - {"/"}

_FILENAME_TABLE = {ord(char): None for char in INVALID_FILENAME_CHARS}
_PATH_TABLE = {ord(char): None for char in _INVALID_PATH_CHARS}


def remove_invalid(value: str, *, keep_separators: bool = False) -> str:
    """Return ``value`` with invalid characters removed and whitespace left untouched."""
    return value.translate(_PATH_TABLE if keep_separators else _FILENAME_TABLE)


def sanitize_filename(value: str) -> str:
    """Return ``value`` without invalid filename characters, including separators.

    Args:
        value: Candidate file or folder name.

    Returns:
        str: Sanitized name with surrounding whitespace trimmed.
    """
    return remove_invalid(value).strip()


def sanitize_path(value: str) -> str:
    """Return ``value`` without invalid characters while keeping ``/`` separators.

    Args:
        value: Candidate relative path such as ``"Day 1/Beach"``.

    Returns:
        str: Sanitized relative path with surrounding whitespace trimmed.
    """
    return remove_invalid(value, keep_separators=True).strip()


__all__ = ["INVALID_FILENAME_CHARS", "remove_invalid", "sanitize_filename", "sanitize_path"]
