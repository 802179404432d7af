"""layermark - Render overlapping, layered text annotations as markup.

Turns a base text plus any number of overlapping, nested or zero-width
labelled intervals into HTML or ANSI terminal output in which every interval
is visibly delimited and, where requested, tagged.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"

__all__ = ["__version__", "setup_logging"]


def setup_logging(level: str = "INFO", log_dir: Path | None = None) -> Path | None:
    """Configure logging to the console and, optionally, a rotating file.

    Library modules only ever call ``logging.getLogger(__name__)``; hosts that
    want diagnostics on screen (configuration warnings, malformed selections)
    call this once at startup.

    Args:
        level: Console log level name (e.g. ``"INFO"``, ``"WARNING"``).
        log_dir: Directory for the per-process log file. ``None`` disables
            file logging.

    Returns:
        Path of the log file, or None when file logging is disabled.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level.upper())
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"layermark.{os.getpid()}.log"

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())
    return log_file
