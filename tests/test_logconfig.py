"""Tests for logging setup."""

from __future__ import annotations

import io
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from smartorg.config import LoggingSettings
from smartorg.logconfig import configure_logging


def test_console_and_file_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "smartorg.log"
    buffer = io.StringIO()
    settings = LoggingSettings(level="info", file=str(log_file))

    logger = configure_logging(settings, console=Console(file=buffer, width=200))
    logging.getLogger("smartorg.engine").info("pass finished")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.INFO
    assert "pass finished" in buffer.getvalue()
    assert "INFO smartorg.engine: pass finished" in log_file.read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    settings = LoggingSettings(file=str(tmp_path / "a.log"))
    configure_logging(settings, console=Console(file=io.StringIO()))

    logger = configure_logging(
        LoggingSettings(), console=Console(file=io.StringIO()), level_override="debug"
    )

    assert logger.level == logging.DEBUG
    assert [type(handler) for handler in logger.handlers] == [RichHandler]
    assert not any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers)


def test_unknown_level_falls_back_to_warning() -> None:
    logger = configure_logging(LoggingSettings(level="chatty"), console=Console(file=io.StringIO()))

    assert logger.level == logging.WARNING
