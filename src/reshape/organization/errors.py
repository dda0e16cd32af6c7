"""Errors raised while planning renames."""


class ConfigurationError(Exception):
    """Raised when a batch cannot be planned because required settings are missing."""
