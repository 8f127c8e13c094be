"""Logging configuration for the face matching pipeline.

Every module obtains its logger through ``get_logger(__name__)`` so that all
output shares one format and the level configured in ``Config``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        if not (hasattr(sys.stderr, "isatty") and sys.stderr.isatty()):
            return super().format(record)

        # Work on a copy so file handlers sharing the record stay uncolored
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{self.BOLD}{record.levelname}{self.RESET}"
            record.name = f"{self.BOLD}{record.name}{self.RESET}"
        return super().format(record)


def setup_logging(
    name: str = "facematch",
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Set up a logger with the project formatting.

    Args:
        name: Logger name (usually the module name).
        level: Log level name. If None, it is read from ``Config.log_level``.
        log_file: Optional path of a file that also receives the output.

    Returns:
        Configured logger instance. Calling this twice for the same name
        returns the already configured logger.

    Example:
        >>> logger = setup_logging(__name__)
        >>> logger.info("Gallery built")
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    if level is None:
        try:
            from facematch.config import get_config

            level = get_config().log_level
        except ValueError:
            # Invalid environment; fall back so the error itself can be logged
            level = "INFO"

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logger.level)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get the configured logger for a module.

    Args:
        name: Module name (typically ``__name__``)

    Returns:
        Configured logger instance.
    """
    return setup_logging(name)
