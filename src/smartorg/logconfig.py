"""Logging setup shared by the CLI and embedding applications."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from smartorg.config import LoggingSettings

_HANDLER_MARKER = "_smartorg_handler"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    settings: LoggingSettings,
    *,
    console: Console | None = None,
    level_override: str | None = None,
) -> logging.Logger:
    """Attach console and optional rotating file handlers to the ``smartorg`` logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        settings: Logging section of the configuration.
        console: Rich console used for terminal output; stderr when omitted.
        level_override: Level name that wins over ``settings.level``.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = logging.getLogger("smartorg")
    level_name = (level_override or settings.level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
            backupCount=max(0, settings.backup_count),
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


__all__ = ["configure_logging"]
