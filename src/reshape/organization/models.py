"""Rename plan data models."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional

from pydantic import Field

from reshape.ingestion.models import ReshapeModel

DEFAULT_DAY_FOLDER_PATTERN = "Day {day_number}"


class VacationModeOptions(ReshapeModel):
    """Settings for grouping files into day-numbered folders.

    Attributes:
        enabled: Whether vacation mode is active.
        start_date: First day of the trip; defaults to the earliest capture date.
        day_folder_pattern: Folder template supporting ``{day_number}`` and ``{day}``
            (zero-padded to two digits).
        subfolder_pattern: Optional template for a folder nested inside each day folder.
    """

    enabled: bool = True
    start_date: Optional[date] = None
    day_folder_pattern: str = DEFAULT_DAY_FOLDER_PATTERN
    subfolder_pattern: Optional[str] = None


class RenamePreviewItem(ReshapeModel):
    """Planned rename for a single file.

    Attributes:
        original_name: Current file name.
        new_name: Proposed name; may contain ``/`` when nested into folders.
        full_path: Absolute path of the source file.
        relative_path: Source directory relative to the scan root.
        has_conflict: Whether the proposed name collides with another item or file.
        is_selected: Whether the item should be executed.
        day_number: Vacation-mode day bucket, when assigned.
    """

    original_name: str
    new_name: str
    full_path: Path
    relative_path: str = ""
    has_conflict: bool = False
    is_selected: bool = True
    day_number: Optional[int] = None

    @property
    def is_noop(self) -> bool:
        """Return whether the item keeps its current name."""
        return self.original_name == self.new_name

    @property
    def is_actionable(self) -> bool:
        """Return whether the executor should attempt this item."""
        return self.is_selected and not self.has_conflict and not self.is_noop


class RenameResult(ReshapeModel):
    """Outcome of one attempted rename."""

    original_path: Path
    new_path: Path
    success: bool
    error: Optional[str] = None


class RenamePreviewResponse(ReshapeModel):
    """Planned items together with the number of conflicts."""

    items: List[RenamePreviewItem] = Field(default_factory=list)
    conflict_count: int = 0

    @classmethod
    def from_items(cls, items: List[RenamePreviewItem]) -> "RenamePreviewResponse":
        return cls(items=items, conflict_count=sum(1 for item in items if item.has_conflict))


class RenameExecuteResponse(ReshapeModel):
    """Executed results together with success and error counts."""

    results: List[RenameResult] = Field(default_factory=list)
    success_count: int = 0
    error_count: int = 0

    @classmethod
    def from_results(cls, results: List[RenameResult]) -> "RenameExecuteResponse":
        successes = sum(1 for result in results if result.success)
        return cls(results=results, success_count=successes, error_count=len(results) - successes)


__all__ = [
    "DEFAULT_DAY_FOLDER_PATTERN",
    "VacationModeOptions",
    "RenamePreviewItem",
    "RenameResult",
    "RenamePreviewResponse",
    "RenameExecuteResponse",
]
