"""Utility modules."""

from .logging import setup_logging, get_logger
from .validation import (
    validate_track_query,
    validate_start_position,
    validate_lyric_order,
    sanitize_filename,
)
from .cache import LyricsStore

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_track_query",
    "validate_start_position",
    "validate_lyric_order",
    "sanitize_filename",
    "LyricsStore",
]
