"""Time tag resolution shared by both lyric dialects."""

import re
from typing import List

# [mm:ss], [mm:ss.xx], [+mm:ss.xx] as used by inline-tag lyrics
_TIME_TAG_RE = re.compile(r"\[([-+]?\d+):(\d+(?:\.\d+)?)\]")
_NUMBER_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?$")


def parse_number(segment: str) -> float:
    """Parse one plain decimal segment, falling back to 0 for junk.

    Only digits with an optional sign and fraction are accepted, so
    ``nan``, ``inf`` and exponents count as junk too.

    >>> parse_number("nan")
    0.0
    """
    segment = segment.strip()
    if not _NUMBER_RE.match(segment):
        return 0.0
    return float(segment)


def parse_time_tag_seconds(tag: str) -> float:
    """Parse the body of a bracket tag (``h:mm:ss.ff``) into seconds.

    Segments are read right-to-left as seconds, minutes and hours; the hour
    segment is optional. A non-numeric segment counts as 0 instead of failing
    the whole line.
    """
    body = tag.strip()
    if body.startswith("["):
        body = body[1:]
    if body.endswith("]"):
        body = body[:-1]

    segments = body.split(":")
    seconds = parse_number(segments[-1]) if len(segments) >= 1 else 0.0
    minutes = parse_number(segments[-2]) if len(segments) >= 2 else 0.0
    hours = parse_number(segments[-3]) if len(segments) >= 3 else 0.0
    return hours * 3600 + minutes * 60 + seconds


def parse_time_tag_ms(tag: str) -> float:
    """Parse a single ``[mm:ss.xx]``-family tag into milliseconds."""
    return 1000 * parse_time_tag_seconds(tag)


def resolve_time_tags(tags: str) -> List[float]:
    """Extract every ``[min:sec]`` tag from a run of tags, in seconds."""
    return [
        float(match.group(1)) * 60 + float(match.group(2))
        for match in _TIME_TAG_RE.finditer(tags)
    ]
