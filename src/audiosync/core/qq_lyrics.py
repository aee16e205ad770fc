"""Parsing for QQ Music style lyrics.

Each line is a run of ``[min:sec]`` tags, the lyric text, and an optional
translation wrapped in 【】. Only line-level tags are read; word-level timing
is ignored.
"""

import re
from typing import List

from .models import LyricLine
from .timetag import resolve_time_tags

_QQ_LINE_RE = re.compile(
    r"^((?:\[[+-]?\d+:\d+(?:\.\d+)?\])+)(?!\[)([^【\n\r]*)(?:【(.*)】)?",
    re.MULTILINE,
)


def parse_qq_lyrics(text: str) -> List[LyricLine]:
    """Parse QQ-style lyric text into a time-sorted list of LyricLine."""
    if not text:
        return []

    lines: List[LyricLine] = []
    for match in _QQ_LINE_RE.finditer(text):
        content = match.group(2).strip()
        translation = (match.group(3) or "").strip() or None
        for seconds in resolve_time_tags(match.group(1)):
            lines.append(
                LyricLine(
                    start_time_ms=seconds * 1000,
                    text=content,
                    translation=translation,
                )
            )

    return sorted(lines, key=lambda l: l.start_time_ms)
