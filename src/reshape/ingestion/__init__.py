"""Folder scanning and metadata extraction."""

from .discovery import FolderScanner, normalize_extensions
from .errors import DirectoryNotFoundError, ExtractionError, ScanError
from .extractors import ExtractedMetadata, MetadataProvider
from .models import FileRecord, GpsCoordinates, ReshapeModel, ScanResponse
from .timezones import TimezoneResolver

__all__ = [
    "DirectoryNotFoundError",
    "ExtractedMetadata",
    "ExtractionError",
    "FileRecord",
    "FolderScanner",
    "GpsCoordinates",
    "MetadataProvider",
    "ReshapeModel",
    "ScanError",
    "ScanResponse",
    "TimezoneResolver",
    "normalize_extensions",
]
