"""Validation utilities."""

import re

from ..core.models import TrackQuery
from ..exceptions import ValidationError


def validate_track_query(query: TrackQuery) -> TrackQuery:
    """Require a track name and an artist."""
    if not query.name.strip():
        raise ValidationError("Track name cannot be empty")
    if not query.artist.strip():
        raise ValidationError("Artist cannot be empty")
    return query


def validate_start_position(position_ms: float) -> float:
    if position_ms < 0:
        raise ValidationError("Start position must be non-negative")
    return position_ms


def validate_lyric_order(lines) -> None:
    """Validate that line start times never decrease."""
    prev_start = None
    for idx, line in enumerate(lines):
        start = line.start_time_ms
        if prev_start is not None and start < prev_start:
            raise ValidationError(
                f"Line {idx + 1} starts before previous line ({start:.0f}ms < {prev_start:.0f}ms)"
            )
        prev_start = start


def sanitize_filename(name: str) -> str:
    """Remove invalid characters from filename."""
    sanitized = re.sub(r'[<>:"/\\|?*]', "", name)
    return sanitized[:100].strip()
