"""Planner that turns scanned files and a pattern into rename previews."""

from __future__ import annotations

import logging
import os
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from reshape.ingestion.models import FileRecord
from reshape.naming import expand, materialize_counters

from .errors import ConfigurationError
from .models import RenamePreviewItem, VacationModeOptions

LOGGER = logging.getLogger(__name__)


def resolve_destination(source: Path, new_name: str, base_folder: Optional[Path] = None) -> Path:
    """Return the absolute destination for renaming ``source`` to ``new_name``.

    Names containing a folder portion are placed under ``base_folder`` (or the
    source's own directory when no base folder is given); plain names rename the
    file in place.

    Args:
        source: Absolute path of the file being renamed.
        new_name: Planned name, optionally containing ``/`` separators.
        base_folder: Root that nested names are relative to.

    Returns:
        Path: Destination path.
    """
    if "/" in new_name or os.sep in new_name:
        return (base_folder or source.parent) / new_name
    return source.parent / new_name


def day_number_for(taken: date, start: date) -> int:
    """Return the 1-based vacation day for ``taken``; days before ``start`` collapse into day 1."""
    return max(1, (taken - start).days + 1)


@dataclass(slots=True)
class _Draft:
    record: FileRecord
    new_name: str
    day_number: Optional[int] = None


class RenamePlanner:
    """Derive rename previews from file records and a rename pattern."""

    def plan(
        self,
        files: Iterable[FileRecord],
        pattern: str,
        vacation_mode: Optional[VacationModeOptions] = None,
        *,
        root: Optional[Path] = None,
    ) -> list[RenamePreviewItem]:
        """Produce the ordered rename preview for ``files``.

        Args:
            files: Records in scan order.
            pattern: Rename template applied to every file.
            vacation_mode: Optional day-folder grouping settings.
            root: Folder that nested names are resolved against when probing the
                disk for conflicts; should match the executor's base folder.

        Returns:
            list[RenamePreviewItem]: Planned renames with conflict flags.

        Raises:
            ConfigurationError: If ``pattern`` is empty.
        """
        if not pattern or not pattern.strip():
            raise ConfigurationError("A rename pattern is required.")

        records = list(files)
        if vacation_mode is not None and vacation_mode.enabled:
            if any(record.date_taken_utc is not None for record in records):
                return self._plan_vacation(records, pattern, vacation_mode, root)
            LOGGER.info("No capture dates found; vacation mode falls back to standard renaming.")

        return self._plan_standard(records, pattern, root)

    # ------------------------------------------------------------------ #
    # Strategies                                                         #
    # ------------------------------------------------------------------ #

    def _plan_standard(
        self,
        records: list[FileRecord],
        pattern: str,
        root: Optional[Path],
    ) -> list[RenamePreviewItem]:
        drafts = [
            _Draft(record, self._render_name(pattern, record.metadata, counter) + record.extension)
            for counter, record in enumerate(records, start=1)
        ]
        return self._finalize(drafts, root)

    def _plan_vacation(
        self,
        records: list[FileRecord],
        pattern: str,
        options: VacationModeOptions,
        root: Optional[Path],
    ) -> list[RenamePreviewItem]:
        dated = [
            (index, record)
            for index, record in enumerate(records)
            if record.date_taken_utc is not None
        ]
        undated = [record for record in records if record.date_taken_utc is None]

        start = options.start_date or min(record.date_taken_utc.date() for _, record in dated)
        groups: dict[int, list[tuple[int, FileRecord]]] = defaultdict(list)
        for index, record in dated:
            groups[day_number_for(record.date_taken_utc.date(), start)].append((index, record))

        drafts: list[_Draft] = []
        global_counter = 0
        for day_number in sorted(groups):
            members = sorted(groups[day_number], key=lambda pair: (pair[1].date_taken_utc, pair[0]))
            day_folder = self._render_day_folder(options.day_folder_pattern, day_number)

            for day_counter, (_, record) in enumerate(members, start=1):
                global_counter += 1
                metadata = dict(record.metadata)
                metadata["day_number"] = str(day_number)
                metadata["day_counter"] = f"{day_counter:03d}"
                metadata["global_counter"] = f"{global_counter:04d}"

                segments = [day_folder] if day_folder else []
                if options.subfolder_pattern:
                    subfolder = self._render_subfolder(options.subfolder_pattern, metadata, day_counter)
                    if subfolder:
                        segments.append(subfolder)
                segments.append(self._render_name(pattern, metadata, day_counter) + record.extension)
                drafts.append(_Draft(record, "/".join(segments), day_number))

        LOGGER.debug(
            "Vacation plan: %d dated file(s) across %d day(s) from %s; %d undated",
            len(dated),
            len(groups),
            start,
            len(undated),
        )

        items = self._finalize(drafts, root)
        items.extend(
            RenamePreviewItem(
                original_name=record.name,
                new_name=record.name,
                full_path=record.full_path,
                relative_path=record.relative_path,
                has_conflict=False,
                is_selected=False,
            )
            for record in undated
        )
        return items

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _render_name(self, pattern: str, metadata: dict[str, str], counter: int) -> str:
        return materialize_counters(expand(pattern, metadata), counter)

    def _render_day_folder(self, pattern: str, day_number: int) -> str:
        values = {"day_number": str(day_number), "day": f"{day_number:02d}"}
        return materialize_counters(expand(pattern, values), day_number)

    def _render_subfolder(self, pattern: str, metadata: dict[str, str], counter: int) -> str:
        expanded = materialize_counters(expand(pattern, metadata, preserve_separators=True), counter)
        return "/".join(segment.strip() for segment in expanded.split("/") if segment.strip())

    def _finalize(self, drafts: list[_Draft], root: Optional[Path]) -> list[RenamePreviewItem]:
        occurrences = Counter(draft.new_name.casefold() for draft in drafts)
        items: list[RenamePreviewItem] = []
        for draft in drafts:
            record = draft.record
            duplicate = occurrences[draft.new_name.casefold()] > 1
            items.append(
                RenamePreviewItem(
                    original_name=record.name,
                    new_name=draft.new_name,
                    full_path=record.full_path,
                    relative_path=record.relative_path,
                    has_conflict=duplicate or self._exists_on_disk(record, draft.new_name, root),
                    is_selected=record.is_selected,
                    day_number=draft.day_number,
                )
            )
        return items

    def _exists_on_disk(self, record: FileRecord, new_name: str, root: Optional[Path]) -> bool:
        if new_name == record.name:
            return False
        destination = resolve_destination(record.full_path, new_name, root)
        if not destination.exists():
            return False
        try:
            # Case-only renames on case-insensitive filesystems resolve to the source.
            return not os.path.samefile(destination, record.full_path)
        except OSError:
            return True


__all__ = ["RenamePlanner", "day_number_for", "resolve_destination"]
