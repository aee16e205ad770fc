"""Dialect dispatch and sequence finalization."""

from typing import List, Optional

from ..config import END_SENTINEL_MS
from .lrc import parse_lrc
from .lyrics_merge import merge_lyrics
from .models import LyricLine, LyricsDialect
from .qq_lyrics import parse_qq_lyrics


def parse_lyrics(text: Optional[str], dialect: LyricsDialect) -> List[LyricLine]:
    """Parse raw lyric text written in the given dialect."""
    if not text:
        return []
    if dialect is LyricsDialect.LRC:
        return parse_lrc(text)
    if dialect is LyricsDialect.QQ:
        return parse_qq_lyrics(text)
    raise ValueError(f"Unknown lyrics dialect: {dialect}")


def parse_with_translation(
    lyric: Optional[str],
    translation: Optional[str],
    dialect: LyricsDialect,
) -> List[LyricLine]:
    """Parse an original track and, when present, merge its translation into it."""
    original = parse_lyrics(lyric, dialect)
    if not original or not translation:
        return original

    translated = parse_lyrics(translation, dialect)
    if not translated:
        return original
    return merge_lyrics(original, translated)


def finalize_lyrics(lines: List[LyricLine], gap_ms: float = END_SENTINEL_MS) -> List[LyricLine]:
    """Append the empty end-of-song line the scheduler retires into."""
    if not lines:
        return lines
    return lines + [LyricLine(start_time_ms=lines[-1].start_time_ms + gap_ms, text="")]
