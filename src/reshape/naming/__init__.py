"""Template expansion and filename sanitizing."""

from .engine import DEFAULT_COUNTER_WIDTH, expand, has_counter, materialize_counters
from .sanitize import INVALID_FILENAME_CHARS, sanitize_filename, sanitize_path

__all__ = [
    "DEFAULT_COUNTER_WIDTH",
    "INVALID_FILENAME_CHARS",
    "expand",
    "has_counter",
    "materialize_counters",
    "sanitize_filename",
    "sanitize_path",
]
