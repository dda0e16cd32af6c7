"""Persistence helpers for user-defined rename patterns."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from .errors import DuplicatePatternError, PatternStoreError
from .models import DEFAULT_PATTERNS, PLACEHOLDERS, RenamePattern

DEFAULT_PATTERNS_PATH = Path("~/.reshape/patterns.json")

_PATTERN_LIST = TypeAdapter(list[RenamePattern])


class PatternStore:
    """Manage the JSON file holding custom rename patterns."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: Location of the patterns file; defaults to ``~/.reshape/patterns.json``.
        """
        self._path = (path or DEFAULT_PATTERNS_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved patterns file path.

        Returns:
            Path: File that stores custom patterns.
        """
        return self._path

    def load(self) -> list[RenamePattern]:
        """Load custom patterns from disk.

        Returns:
            list[RenamePattern]: Stored patterns, empty when the file does not exist.

        Raises:
            PatternStoreError: If the file cannot be parsed.
        """
        if not self._path.exists():
            return []

        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as exc:
            raise PatternStoreError(f"Invalid custom pattern data: {exc}") from exc

        try:
            return _PATTERN_LIST.validate_python(data)
        except ValidationError as exc:
            raise PatternStoreError(f"Invalid custom pattern data: {exc}") from exc

    def save(self, patterns: Iterable[RenamePattern]) -> None:
        """Persist custom patterns to disk.

        Args:
            patterns: Patterns to write, replacing the current file contents.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [pattern.model_dump(mode="json", by_alias=True) for pattern in patterns]
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def add(self, pattern: str, description: str = "") -> RenamePattern:
        """Add a custom pattern.

        Args:
            pattern: Template string to store.
            description: Explanation shown in pattern listings.

        Returns:
            RenamePattern: The stored pattern.

        Raises:
            PatternStoreError: If ``pattern`` is blank.
            DuplicatePatternError: If the pattern is already stored (case-insensitive).
        """
        cleaned = pattern.strip()
        if not cleaned:
            raise PatternStoreError("Pattern must not be empty.")

        patterns = self.load()
        if any(existing.pattern.casefold() == cleaned.casefold() for existing in patterns):
            raise DuplicatePatternError(f"Pattern '{cleaned}' already exists")

        entry = RenamePattern(pattern=cleaned, description=description.strip())
        patterns.append(entry)
        self.save(patterns)
        return entry

    def remove(self, pattern: str) -> bool:
        """Remove a custom pattern, matching case-insensitively.

        Args:
            pattern: Template string to remove.

        Returns:
            bool: True when at least one pattern was removed.
        """
        patterns = self.load()
        target = pattern.strip().casefold()
        remaining = [existing for existing in patterns if existing.pattern.casefold() != target]
        if len(remaining) == len(patterns):
            return False
        self.save(remaining)
        return True

    def all_patterns(self) -> list[RenamePattern]:
        """Return the built-in patterns followed by custom patterns.

        Returns:
            list[RenamePattern]: Combined pattern list.
        """
        return [*DEFAULT_PATTERNS, *self.load()]


__all__ = [
    "PatternStore",
    "DEFAULT_PATTERNS",
    "DEFAULT_PATTERNS_PATH",
    "PLACEHOLDERS",
    "RenamePattern",
    "PatternStoreError",
    "DuplicatePatternError",
]
