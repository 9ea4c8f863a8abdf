"""Structured JSON logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger

# Ordered from most to least verbose; -v/-q step through this list
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logger(name: str = "btrfs_exporter", level: str = "INFO") -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def resolve_log_level(base: str = "INFO", verbose: int = 0, quiet: int = 0) -> str:
    """
    Shift a base log level by the number of -v and -q flags given.

    Args:
        base: Starting level name
        verbose: Count of -v flags (each one step more verbose)
        quiet: Count of -q flags (each one step quieter)

    Returns:
        str: Resulting level name, clamped to LOG_LEVELS
    """
    base = base.upper()
    index = LOG_LEVELS.index(base) if base in LOG_LEVELS else LOG_LEVELS.index("INFO")
    index = index - verbose + quiet
    index = max(0, min(index, len(LOG_LEVELS) - 1))
    return LOG_LEVELS[index]
