"""Configuration models describing Reshape settings."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReshapeBaseModel(BaseModel):
    """Shared configuration for Reshape settings models."""

    model_config = ConfigDict(extra="forbid")


class ScanOptions(ReshapeBaseModel):
    """Folder scanning defaults.

    Attributes:
        extensions: Extension filters applied when the CLI passes none.
        recursive: Whether to descend into subdirectories.
        include_hidden: Whether dot-files and dot-directories are scanned.
        follow_symlinks: Whether symlinked files and directories are followed.
    """

    extensions: List[str] = Field(default_factory=list)
    recursive: bool = True
    include_hidden: bool = True
    follow_symlinks: bool = False


class RenameOptions(ReshapeBaseModel):
    """Rename defaults.

    Attributes:
        default_pattern: Pattern used when the CLI does not pass ``--pattern``.
        confirm: Whether ``reshape rename`` asks before touching files.
    """

    default_pattern: Optional[str] = None
    confirm: bool = True


class VacationOptions(ReshapeBaseModel):
    """Vacation-mode folder templates.

    Attributes:
        day_folder_pattern: Day folder template (``{day_number}``, ``{day}``).
        subfolder_pattern: Optional template nested under each day folder.
    """

    day_folder_pattern: str = "Day {day_number}"
    subfolder_pattern: Optional[str] = None


class PatternOptions(ReshapeBaseModel):
    """Custom pattern storage."""

    store_path: str = "~/.reshape/patterns.json"


class LoggingSettings(ReshapeBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Log file location.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file: str = "~/.reshape/reshape.log"
    max_size_mb: int = 10
    backup_count: int = 3

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CLIOptions(ReshapeBaseModel):
    """CLI presentation defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class ReshapeConfig(ReshapeBaseModel):
    """Top-level configuration for Reshape."""

    scan: ScanOptions = Field(default_factory=ScanOptions)
    rename: RenameOptions = Field(default_factory=RenameOptions)
    vacation: VacationOptions = Field(default_factory=VacationOptions)
    patterns: PatternOptions = Field(default_factory=PatternOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ReshapeBaseModel",
    "ScanOptions",
    "RenameOptions",
    "VacationOptions",
    "PatternOptions",
    "LoggingSettings",
    "CLIOptions",
    "ReshapeConfig",
]
