"""Placeholder metadata extraction for scanned files."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from reshape.naming import sanitize_filename

from .errors import ExtractionError
from .models import GpsCoordinates

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp", ".heic"}
)
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".avi", ".mkv", ".wmv", ".flv"})
AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma"})

_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


@dataclass(slots=True)
class ExtractedMetadata:
    """Metadata read from a single file.

    Attributes:
        metadata: Placeholder name to value mapping.
        gps: Coordinates from the GPS tags, when present.
        date_taken: Camera-local capture timestamp (naive), when present.
    """

    metadata: Dict[str, str] = field(default_factory=dict)
    gps: Optional[GpsCoordinates] = None
    date_taken: Optional[datetime] = None


class MetadataProvider:
    """Build the placeholder map for a file from filesystem and EXIF data."""

    def extract(self, path: Path) -> ExtractedMetadata:
        """Return placeholder values, GPS coordinates and capture time for ``path``.

        Filesystem keys are always present. For image files the EXIF capture date,
        camera and dimensions override or extend them; unreadable images keep the
        filesystem values only.

        Args:
            path: File to inspect.

        Returns:
            ExtractedMetadata: Metadata bundle for the file.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        stat = path.stat()
        modified = datetime.fromtimestamp(stat.st_mtime)
        created = datetime.fromtimestamp(getattr(stat, "st_birthtime", stat.st_ctime))
        extension = path.suffix.lower()

        metadata: Dict[str, str] = {
            "filename": path.stem,
            "ext": extension.lstrip("."),
            "size": str(stat.st_size),
            "created": created.strftime("%Y-%m-%d"),
            "created_time": created.strftime("%H-%M-%S"),
            "modified": modified.strftime("%Y-%m-%d"),
            "modified_time": modified.strftime("%H-%M-%S"),
            "year": str(modified.year),
            "month": f"{modified.month:02d}",
            "day": f"{modified.day:02d}",
        }
        result = ExtractedMetadata(metadata=metadata)

        if extension in IMAGE_EXTENSIONS:
            try:
                overrides, gps, date_taken = self._read_image(path)
            except ExtractionError as exc:
                LOGGER.debug("Falling back to filesystem metadata for %s: %s", path, exc)
            else:
                metadata.update(overrides)
                result.gps = gps
                result.date_taken = date_taken

        return result

    def _read_image(
        self, path: Path
    ) -> tuple[Dict[str, str], Optional[GpsCoordinates], Optional[datetime]]:
        overrides: Dict[str, str] = {}
        try:
            with Image.open(path) as img:
                width, height = img.size
                exif = img.getexif()
                exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
                gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
        except (
            OSError,
            UnidentifiedImageError,
            Image.DecompressionBombError,
            ValueError,
            SyntaxError,
        ) as exc:
            raise ExtractionError(str(exc)) from exc

        overrides["width"] = str(width)
        overrides["height"] = str(height)

        raw_date = (
            exif_ifd.get(ExifTags.Base.DateTimeOriginal)
            or exif.get(ExifTags.Base.DateTimeOriginal)
            or exif.get(ExifTags.Base.DateTime)
        )
        date_taken = _parse_exif_date(raw_date) if raw_date else None
        if date_taken is not None:
            overrides["date_taken"] = date_taken.strftime("%Y-%m-%d")
            overrides["time_taken"] = date_taken.strftime("%H-%M-%S")
            overrides["year"] = str(date_taken.year)
            overrides["month"] = f"{date_taken.month:02d}"
            overrides["day"] = f"{date_taken.day:02d}"

        for tag, key in ((ExifTags.Base.Make, "camera_make"), (ExifTags.Base.Model, "camera_model")):
            value = exif.get(tag)
            if isinstance(value, str):
                cleaned = sanitize_filename(value)
                if cleaned:
                    overrides[key] = cleaned

        gps = gps_from_ifd(gps_ifd)
        if gps is not None:
            overrides["gps_lat"] = f"{gps.latitude:.6f}"
            overrides["gps_lon"] = f"{gps.longitude:.6f}"

        return overrides, gps, date_taken


def gps_from_ifd(gps_ifd: Mapping[int, Any]) -> Optional[GpsCoordinates]:
    """Convert an EXIF GPS IFD into decimal-degree coordinates.

    Args:
        gps_ifd: Mapping of GPS tag ids to values as returned by Pillow.

    Returns:
        Optional[GpsCoordinates]: Coordinates, or ``None`` when tags are missing or invalid.
    """
    try:
        latitude = _to_degrees(gps_ifd[ExifTags.GPS.GPSLatitude])
        longitude = _to_degrees(gps_ifd[ExifTags.GPS.GPSLongitude])
    except (KeyError, TypeError, ValueError, ZeroDivisionError):
        return None

    if str(gps_ifd.get(ExifTags.GPS.GPSLatitudeRef, "N")).strip().upper().startswith("S"):
        latitude = -latitude
    if str(gps_ifd.get(ExifTags.GPS.GPSLongitudeRef, "E")).strip().upper().startswith("W"):
        longitude = -longitude

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return None
    return GpsCoordinates(latitude=latitude, longitude=longitude)


def _to_degrees(value: Any) -> float:
    degrees, minutes, seconds = value
    return float(degrees) + float(minutes) / 60.0 + float(seconds) / 3600.0


def _parse_exif_date(raw: Any) -> Optional[datetime]:
    text = raw.decode("ascii", "ignore") if isinstance(raw, bytes) else str(raw)
    text = text.strip("\x00 ").strip()
    try:
        return datetime.strptime(text, _EXIF_DATE_FORMAT)
    except ValueError:
        LOGGER.debug("Ignoring unparseable EXIF date %r", text)
        return None


__all__ = [
    "AUDIO_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "VIDEO_EXTENSIONS",
    "ExtractedMetadata",
    "MetadataProvider",
    "gps_from_ifd",
]
