"""Folder discovery producing file records for the planner."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from .errors import DirectoryNotFoundError
from .extractors import MetadataProvider
from .models import FileRecord
from .timezones import TimezoneResolver

LOGGER = logging.getLogger(__name__)


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


def normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str]:
    """Return lower-cased, dot-prefixed extension filters.

    Args:
        extensions: Raw filters such as ``[".JPG", "png"]``.

    Returns:
        frozenset[str]: Normalized filters; empty means every file matches.
    """
    normalized: set[str] = set()
    for extension in extensions or ():
        value = extension.strip().lower()
        if not value:
            continue
        normalized.add(value if value.startswith(".") else f".{value}")
    return frozenset(normalized)


class FolderScanner:
    """Discover files within a directory tree and enrich them with metadata."""

    def __init__(
        self,
        provider: MetadataProvider | None = None,
        resolver: TimezoneResolver | None = None,
        *,
        recursive: bool = True,
        include_hidden: bool = True,
        follow_symlinks: bool = False,
    ) -> None:
        self.provider = provider or MetadataProvider()
        self.resolver = resolver or TimezoneResolver()
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks

    def scan(self, folder: Path | str, extensions: Sequence[str] | None = None) -> list[FileRecord]:
        """Return records for every matching file under ``folder``.

        Args:
            folder: Absolute or relative folder path.
            extensions: Optional case-insensitive extension filters.

        Returns:
            list[FileRecord]: Records ordered by full path.

        Raises:
            DirectoryNotFoundError: If ``folder`` is not an existing directory.
        """
        root = Path(folder).expanduser()
        if not root.is_dir():
            raise DirectoryNotFoundError(f"Folder not found: {folder}")
        root = root.resolve()
        filters = normalize_extensions(extensions)

        records: list[FileRecord] = []
        for path in self._iter_paths(root):
            if filters and path.suffix.lower() not in filters:
                continue
            relative = path.relative_to(root)
            if not self.include_hidden and _is_hidden(relative):
                continue
            record = self._build_record(root, path)
            if record is not None:
                records.append(record)

        records.sort(key=lambda record: str(record.full_path))
        LOGGER.info("Scanned %s: %d file(s)", root, len(records))
        return records

    def _build_record(self, root: Path, path: Path) -> FileRecord | None:
        try:
            stat = path.stat()
            extracted = self.provider.extract(path)
        except OSError as exc:
            LOGGER.warning("Skipping %s: %s", path, exc)
            return None

        date_taken_utc = None
        if extracted.date_taken is not None:
            date_taken_utc = self.resolver.to_utc(extracted.date_taken, extracted.gps)

        parent = path.parent.relative_to(root).as_posix()
        return FileRecord(
            name=path.name,
            full_path=path,
            relative_path="" if parent == "." else parent,
            extension=path.suffix.lower(),
            size=stat.st_size,
            created_at=datetime.fromtimestamp(
                getattr(stat, "st_birthtime", stat.st_ctime)
            ).astimezone(),
            modified_at=datetime.fromtimestamp(stat.st_mtime).astimezone(),
            metadata=extracted.metadata,
            gps=extracted.gps,
            date_taken_utc=date_taken_utc,
        )

    def _iter_paths(self, root: Path) -> Iterator[Path]:
        if not self.recursive:
            yield from (path for path in root.iterdir() if self._accepts(path))
            return

        visited = {os.path.realpath(root)}
        for dirpath, dirnames, filenames in os.walk(root, followlinks=self.follow_symlinks):
            if self.follow_symlinks:
                # Each real directory is walked once so link cycles terminate.
                kept = []
                for name in dirnames:
                    real = os.path.realpath(os.path.join(dirpath, name))
                    if real not in visited:
                        visited.add(real)
                        kept.append(name)
                dirnames[:] = kept
            current = Path(dirpath)
            for filename in filenames:
                path = current / filename
                if self._accepts(path):
                    yield path

    def _accepts(self, path: Path) -> bool:
        if path.is_symlink() and not self.follow_symlinks:
            return False
        return path.is_file()


__all__ = ["FolderScanner", "normalize_extensions"]
