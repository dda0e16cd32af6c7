"""Executor for rename previews."""

from __future__ import annotations

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Iterable, Optional

from .models import RenamePreviewItem, RenameResult
from .planner import resolve_destination

LOGGER = logging.getLogger(__name__)


class RenameExecutor:
    """Apply (or simulate) planned renames one item at a time."""

    def execute(
        self,
        items: Iterable[RenamePreviewItem],
        base_folder: Optional[Path] = None,
        dry_run: bool = False,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> list[RenameResult]:
        """Rename every selected, conflict-free item whose name actually changes.

        Args:
            items: Preview items in the order they should be applied.
            base_folder: Root for names that contain folders; defaults to each
                source file's own directory.
            dry_run: When true, report what would happen without touching the disk.
            cancel: Optional event checked before each item; once set, remaining
                items are left untouched and completed renames are kept.

        Returns:
            list[RenameResult]: One result per attempted item, in input order.
        """
        results: list[RenameResult] = []
        for item in items:
            if not item.is_actionable:
                continue
            if cancel is not None and cancel.is_set():
                LOGGER.warning("Rename cancelled after %d item(s).", len(results))
                break

            source = Path(item.full_path)
            destination = resolve_destination(source, item.new_name, base_folder)
            try:
                if dry_run:
                    self._validate(source, destination)
                else:
                    self._move(source, destination)
            except OSError as exc:
                LOGGER.warning("Failed to rename %s -> %s: %s", source, destination, exc)
                results.append(
                    RenameResult(
                        original_path=source,
                        new_path=destination,
                        success=False,
                        error=str(exc),
                    )
                )
                continue

            LOGGER.info("%s %s -> %s", "Would rename" if dry_run else "Renamed", source, destination)
            results.append(RenameResult(original_path=source, new_path=destination, success=True))

        return results

    def _validate(self, source: Path, destination: Path) -> None:
        if not source.exists():
            raise FileNotFoundError(f"Source path is missing: {source}")
        if self._occupied(source, destination):
            raise FileExistsError(f"Destination already exists: {destination}")

    def _move(self, source: Path, destination: Path) -> None:
        self._validate(source, destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))

    def _occupied(self, source: Path, destination: Path) -> bool:
        if not destination.exists():
            return False
        try:
            return not os.path.samefile(source, destination)
        except OSError:
            return True


__all__ = ["RenameExecutor"]
