"""Logging configuration for AudioSync."""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Libraries whose INFO/DEBUG chatter drowns out lyric resolution logs
_QUIET_LOGGERS = ("urllib3", "requests", "asyncio", "charset_normalizer")

# Provider calls run in worker threads; the thread name tells them apart
_VERBOSE_FORMAT = "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"
_SHORT_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(
    level: Optional[str] = None, log_file: Optional[Path] = None, verbose: bool = False
) -> logging.Logger:
    """Configure the ``audiosync`` logger.

    Args:
        level: Level name; defaults to ``AUDIOSYNC_LOG_LEVEL`` or INFO
        log_file: Also write records to this file (always verbose format)
        verbose: Use the timestamped format on the console

    Console output goes to stderr so lyric lines printed on stdout stay clean.
    """
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    level_name = (level or os.getenv("AUDIOSYNC_LOG_LEVEL", "INFO")).upper()
    logger = logging.getLogger("audiosync")
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT if verbose else _SHORT_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "audiosync") -> logging.Logger:
    """Get logger instance."""
    return logging.getLogger(name)
