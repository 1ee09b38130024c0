"""Logging setup: full records to a file, warnings to stderr via rich."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_path: str | Path, level: str = "INFO") -> None:
    """Attach a file handler and a stderr RichHandler to the package logger.

    Menu output owns stdout, so only WARNING and above reach the terminal.
    """
    logger = logging.getLogger("carsharing")
    level_value = logging.getLevelName(level)
    logger.setLevel(level_value if isinstance(level_value, int) else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(file_handler)

    stderr_handler = RichHandler(console=Console(stderr=True), show_path=False)
    stderr_handler.setLevel(logging.WARNING)
    logger.addHandler(stderr_handler)
