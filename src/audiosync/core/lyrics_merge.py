"""
Lyrics merging utility: attach a translation track to an original track by timestamp.
"""

from typing import List
import logging

from ..config import MERGE_THRESHOLD_MS
from .models import LyricLine

logger = logging.getLogger(__name__)


def merge_lyrics(
    original: List[LyricLine],
    translation: List[LyricLine],
    threshold_ms: float = MERGE_THRESHOLD_MS,
) -> List[LyricLine]:
    """
    Merge-join two sorted line lists on approximate start time.

    An original line takes the text of the translation line whose start time
    is within ``threshold_ms`` of its own. Translation lines with no partner
    are dropped; original lines are all kept, in order.

    Returns:
        A new list with exactly ``len(original)`` lines
    """
    merged: List[LyricLine] = []
    i = 0
    j = 0
    dropped = 0

    while i < len(original) and j < len(translation):
        orig_line = original[i]
        trans_line = translation[j]
        diff = abs(orig_line.start_time_ms - trans_line.start_time_ms)

        if diff < threshold_ms:
            merged.append(orig_line.with_translation(trans_line.text))
            i += 1
            j += 1
        elif orig_line.start_time_ms < trans_line.start_time_ms:
            merged.append(orig_line)
            i += 1
        else:
            dropped += 1
            j += 1

    # Whatever is left of the original goes through untranslated
    merged.extend(original[i:])

    dropped += len(translation) - j
    if dropped:
        logger.debug(f"Dropped {dropped} translation lines without a timestamp match")
    return merged
