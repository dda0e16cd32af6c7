"""Logging setup for the Reshape CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from reshape.config.models import LoggingSettings

_HANDLER_NAME = "reshape-file"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings, *, log_file: Path | None = None) -> logging.Logger:
    """Attach a rotating file handler to the ``reshape`` logger.

    Calling this again replaces the handler installed by a previous call.

    Args:
        settings: Logging section of the configuration.
        log_file: Optional override for ``settings.file``.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = logging.getLogger("reshape")
    logger.setLevel(settings.level)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()

    path = (log_file or Path(settings.file)).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=max(settings.max_size_mb, 0) * 1024 * 1024,
            backupCount=max(settings.backup_count, 0),
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("Could not open log file %s: %s", path, exc)
        return logger

    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging"]
