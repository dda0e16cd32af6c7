"""Pattern expansion for rename templates.

Templates reference file metadata through ``{placeholder}`` tokens. Expansion is a
pure function of a single file's metadata, so the sequence-dependent ``{counter}``
token is only normalized here (``{counter}`` becomes ``{counter:3}``) and is turned
into a number later by the planner via :func:`materialize_counters`.
"""

from __future__ import annotations

import re
from typing import Mapping

from .sanitize import remove_invalid

DEFAULT_COUNTER_WIDTH = 3

_COUNTER_PATTERN = re.compile(r"\{counter(?::(\d+))?\}", re.IGNORECASE)
_CANONICAL_COUNTER = re.compile(r"\{counter:(\d+)\}")


def expand(
    pattern: str,
    metadata: Mapping[str, str],
    *,
    preserve_separators: bool = False,
) -> str:
    """Expand ``pattern`` against ``metadata`` and sanitize the result.

    Args:
        pattern: Rename template such as ``"{year}-{month}-{day}_{filename}"``.
        metadata: Placeholder values for a single file.
        preserve_separators: Keep ``/`` so the result can describe nested folders.

    Returns:
        str: Expanded name. Unknown placeholders are left verbatim and counter
            placeholders are kept in their canonical ``{counter:N}`` form.
    """
    result = pattern
    for key, value in metadata.items():
        token = re.compile(re.escape(f"{{{key}}}"), re.IGNORECASE)
        result = token.sub(lambda _match, value=value: value, result)

    result = _COUNTER_PATTERN.sub(_canonical_counter, result)
    return _sanitize_around_counters(result, keep_separators=preserve_separators)


def has_counter(name: str) -> bool:
    """Return whether ``name`` still holds a canonical counter placeholder."""
    return _CANONICAL_COUNTER.search(name) is not None


def materialize_counters(name: str, value: int) -> str:
    """Replace every canonical counter placeholder with ``value`` zero-padded to its width.

    Args:
        name: Expanded name produced by :func:`expand`.
        value: Counter value for the file being planned.

    Returns:
        str: Name with numeric counters substituted.
    """
    return _CANONICAL_COUNTER.sub(lambda match: str(value).zfill(int(match.group(1))), name)


def _canonical_counter(match: re.Match[str]) -> str:
    width = match.group(1)
    padding = int(width) if width else DEFAULT_COUNTER_WIDTH
    return f"{{counter:{padding}}}"


def _sanitize_around_counters(value: str, *, keep_separators: bool) -> str:
    # Counter tokens contain ":", itself an invalid filename character.
    pieces: list[str] = []
    position = 0
    for match in _CANONICAL_COUNTER.finditer(value):
        pieces.append(remove_invalid(value[position : match.start()], keep_separators=keep_separators))
        pieces.append(match.group(0))
        position = match.end()
    pieces.append(remove_invalid(value[position:], keep_separators=keep_separators))
    return "".join(pieces).strip()


__all__ = ["DEFAULT_COUNTER_WIDTH", "expand", "has_counter", "materialize_counters"]
