"""Pattern store errors."""


class PatternStoreError(Exception):
    """Base exception for custom pattern store operations."""


class DuplicatePatternError(PatternStoreError):
    """Raised when adding a pattern that is already stored."""
