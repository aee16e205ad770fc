"""LRC parsing for bracket-prefixed lyrics (NetEase style).

This module handles:
- Raw text cleanup (escaped newlines, wrapping quotes, blank edges)
- Header lines such as [ti:...] and [offset:...]
- Lines carrying one or more leading time tags
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import LyricLine
from .timetag import parse_number, parse_time_tag_seconds

# ----------------------
# Header handling
# ----------------------
_HEADER_FIELDS = {
    "ti": "title",
    "ar": "artist",
    "al": "album",
    "by": "by",
}


@dataclass
class LrcHeader:
    """ID tags found in an LRC document."""

    title: str = ""
    artist: str = ""
    album: str = ""
    by: str = ""
    offset: float = 0.0


def _parse_header(prefix: str, line: str) -> Optional[str]:
    """Return the value of a ``[prefix:value]`` header line, if it is one."""
    opener = f"[{prefix}:"
    if line.startswith(opener) and line.endswith("]"):
        return line[len(opener):-1]
    return None


def _parse_offset(value: str) -> float:
    return parse_number(value)


# ----------------------
# Text cleanup
# ----------------------
def split_lrc_lines(lrc_text: str) -> List[str]:
    """Normalize a raw LRC blob and split it into lines."""
    cleaned = lrc_text.replace("\\n", "\n")
    cleaned = cleaned.strip("\"'")
    cleaned = cleaned.strip("\r\n")
    return cleaned.splitlines()


# ----------------------
# Line parsing
# ----------------------
def _split_tags(line: str) -> Tuple[List[str], str]:
    """Peel leading ``[...]`` tags off a line; return (tags, remaining text)."""
    tags: List[str] = []
    rest = line
    while rest.startswith("["):
        close = rest.find("]")
        if close < 0:
            break
        tags.append(rest[1:close])
        rest = rest[close + 1:].strip()
    return tags, rest


def parse_lrc_line(line: str, offset: float = 0.0) -> List[LyricLine]:
    """Expand one text line into a LyricLine per leading time tag.

    The offset is added to the seconds sum before the conversion to
    milliseconds, so ``[offset:500]`` shifts lines by 500 seconds.
    """
    tags, text = _split_tags(line)
    return [
        LyricLine(start_time_ms=1000 * (parse_time_tag_seconds(tag) + offset), text=text)
        for tag in tags
    ]


def parse_lrc_with_header(lrc_text: str) -> Tuple[LrcHeader, List[LyricLine]]:
    """Parse LRC text into its header and a time-sorted list of lines."""
    header = LrcHeader()
    lines: List[LyricLine] = []
    if not lrc_text:
        return header, lines

    for raw_line in split_lrc_lines(lrc_text):
        line = raw_line.strip()
        if not line:
            continue

        offset = _parse_header("offset", line)
        if offset is not None:
            header.offset = _parse_offset(offset)
            continue

        for prefix, attr in _HEADER_FIELDS.items():
            value = _parse_header(prefix, line)
            if value is not None:
                setattr(header, attr, value.strip())
                break
        else:
            # A line that ends in a tag has no lyric text to show
            if not line.endswith("]"):
                lines.extend(parse_lrc_line(line, header.offset))

    # sorted() is stable, so lines sharing a timestamp keep file order
    lines = sorted(lines, key=lambda l: l.start_time_ms)
    return header, lines


def parse_lrc(lrc_text: str) -> List[LyricLine]:
    """Parse LRC text into a time-sorted list of LyricLine."""
    _, lines = parse_lrc_with_header(lrc_text)
    return lines


def has_timestamps(lrc_text: str) -> bool:
    """Check whether LRC text contains at least one timed lyric line."""
    return bool(parse_lrc(lrc_text))
