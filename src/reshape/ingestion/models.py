"""Data models produced by folder scans."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReshapeModel(BaseModel):
    """Shared configuration for models exchanged with CLI/JSON consumers.

    Fields serialize with camelCase aliases (``fullPath``, ``hasConflict``) and can be
    populated by either the alias or the Python attribute name.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        """Return a JSON-ready mapping using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class GpsCoordinates(ReshapeModel):
    """Decimal-degree coordinates read from a file's GPS tags.

    Attributes:
        latitude: Latitude in degrees, negative for the southern hemisphere.
        longitude: Longitude in degrees, negative west of Greenwich.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class FileRecord(ReshapeModel):
    """Immutable snapshot of a scanned file and its placeholder values.

    Attributes:
        name: File name including the extension.
        full_path: Absolute path of the file.
        relative_path: Directory relative to the scan root using ``/`` separators;
            empty for files directly inside the root.
        extension: Lower-cased extension including the leading dot.
        size: Size in bytes.
        created_at: Filesystem creation (or metadata change) time.
        modified_at: Filesystem last-write time.
        is_selected: Whether the file participates in renames by default.
        metadata: Placeholder name to value mapping.
        gps: Coordinates when the file carries GPS tags.
        date_taken_utc: Capture timestamp normalized to UTC.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    full_path: Path
    relative_path: str = ""
    extension: str = ""
    size: int = 0
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    is_selected: bool = True
    metadata: Dict[str, str] = Field(default_factory=dict)
    gps: Optional[GpsCoordinates] = None
    date_taken_utc: Optional[datetime] = None


class ScanResponse(ReshapeModel):
    """Result of scanning a folder."""

    folder_path: str
    files: List[FileRecord] = Field(default_factory=list)
    total_count: int = 0


__all__ = ["ReshapeModel", "GpsCoordinates", "FileRecord", "ScanResponse"]
