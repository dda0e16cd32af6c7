"""Rename planning and execution."""

from .errors import ConfigurationError
from .executor import RenameExecutor
from .models import (
    DEFAULT_DAY_FOLDER_PATTERN,
    RenameExecuteResponse,
    RenamePreviewItem,
    RenamePreviewResponse,
    RenameResult,
    VacationModeOptions,
)
from .planner import RenamePlanner, day_number_for, resolve_destination

__all__ = [
    "ConfigurationError",
    "DEFAULT_DAY_FOLDER_PATTERN",
    "RenameExecuteResponse",
    "RenameExecutor",
    "RenamePlanner",
    "RenamePreviewItem",
    "RenamePreviewResponse",
    "RenameResult",
    "VacationModeOptions",
    "day_number_for",
    "resolve_destination",
]
