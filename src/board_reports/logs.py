"""Logging setup for the CLI: rich console output plus an optional log file."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_HANDLER_MARK = "_board_reports_handler"


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the ``board_reports`` logger and return it.

    Calling it again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger("board_reports")
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    console_level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setLevel(console_level)
    setattr(rich_handler, _HANDLER_MARK, True)
    logger.addHandler(rich_handler)

    level = console_level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)
        level = logging.DEBUG

    logger.setLevel(level)
    return logger
