"""Rename pattern models and the built-in pattern set."""

from __future__ import annotations

from reshape.ingestion.models import ReshapeModel


class RenamePattern(ReshapeModel):
    """A named rename template.

    Attributes:
        pattern: Template string such as ``"{year}-{month}-{day}_{filename}"``.
        description: Human readable explanation shown next to the pattern.
    """

    pattern: str
    description: str = ""


DEFAULT_PATTERNS: tuple[RenamePattern, ...] = (
    RenamePattern(
        pattern="{year}-{month}-{day}_{filename}",
        description="Date prefix: 2024-01-15_photo",
    ),
    RenamePattern(
        pattern="{date_taken}_{time_taken}_{filename}",
        description="EXIF date/time: 2024-01-15_14-30-00_photo",
    ),
    RenamePattern(
        pattern="{year}/{month}/{filename}",
        description="Year/Month folders (use with caution)",
    ),
    RenamePattern(
        pattern="{camera_model}_{date_taken}_{counter:4}",
        description="Camera + date + counter: iPhone_2024-01-15_0001",
    ),
    RenamePattern(
        pattern="{filename}_{counter:3}",
        description="Original name + counter: photo_001",
    ),
    RenamePattern(
        pattern="IMG_{year}{month}{day}_{counter:4}",
        description="Standard format: IMG_20240115_0001",
    ),
)

PLACEHOLDERS: tuple[tuple[str, str], ...] = (
    ("{filename}", "Original name without extension"),
    ("{ext}", "Original extension without the dot"),
    ("{year}, {month}, {day}", "Capture date, or last-modified date without EXIF"),
    ("{created}, {created_time}", "Filesystem creation date and time"),
    ("{modified}, {modified_time}", "Filesystem last-modified date and time"),
    ("{date_taken}, {time_taken}", "EXIF capture date and time"),
    ("{camera_make}, {camera_model}", "Camera manufacturer and model"),
    ("{width}, {height}", "Image dimensions in pixels"),
    ("{gps_lat}, {gps_lon}", "GPS coordinates in decimal degrees"),
    ("{size}", "File size in bytes"),
    ("{counter:N}", "Auto-incrementing counter with N digits (default 3)"),
    ("{day_number}, {day_counter}, {global_counter}", "Vacation mode day and counters"),
)

__all__ = ["RenamePattern", "DEFAULT_PATTERNS", "PLACEHOLDERS"]
