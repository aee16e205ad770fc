"""Local lyrics store."""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import STORE_MAX_AGE_DAYS, get_cache_dir
from ..core.models import LyricLine, SongRecord
from ..core.serialization import record_from_json, record_to_json
from ..exceptions import CacheError
from ..utils.logging import get_logger
from .validation import sanitize_filename

logger = get_logger(__name__)


class LyricsStore:
    """Persists resolved lyrics per player track id as JSON files."""

    def __init__(self, cache_dir: Optional[Path] = None):
        self.cache_dir = cache_dir or get_cache_dir()
        self.lyrics_dir = self.cache_dir / "lyrics"
        self.lyrics_dir.mkdir(parents=True, exist_ok=True)

    def record_path(self, track_id: str) -> Path:
        filename = sanitize_filename(track_id)
        if not filename:
            raise CacheError(f"Unusable track id: {track_id!r}")
        return self.lyrics_dir / f"{filename}.json"

    def save_lyrics(self, track_id: str, track_name: str, lines: List[LyricLine]) -> SongRecord:
        """Save lyrics for a track, replacing any previous record."""
        record = SongRecord(track_id=track_id, track_name=track_name, lines=list(lines), saved_at=time.time())
        path = self.record_path(track_id)
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(record_to_json(record), f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved {len(lines)} lines for {track_id}")
        except OSError as e:
            raise CacheError(f"Failed to save lyrics: {e}") from e
        return record

    def load_record(self, track_id: str) -> Optional[SongRecord]:
        path = self.record_path(track_id)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                record = record_from_json(json.load(f))
            logger.debug(f"Loaded lyrics for {track_id}")
            return record
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load lyrics for {track_id}: {e}")
            return None

    def load_lyrics(self, track_id: str) -> Optional[List[LyricLine]]:
        """Stored lines for a track, or None when nothing usable is stored."""
        record = self.load_record(track_id)
        if record is None or not record.lines:
            return None
        return record.lines

    def delete_lyrics(self, track_id: str) -> bool:
        path = self.record_path(track_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise CacheError(f"Failed to delete lyrics: {e}") from e
        logger.info(f"Cleared stored lyrics for {track_id}")
        return True

    def cleanup_old_files(self, max_age_days: int = STORE_MAX_AGE_DAYS) -> int:
        """Remove records older than specified days."""
        cutoff_time = time.time() - (max_age_days * 24 * 60 * 60)
        removed_count = 0

        for path in self.lyrics_dir.glob("*.json"):
            if path.stat().st_mtime < cutoff_time:
                try:
                    path.unlink()
                    removed_count += 1
                except OSError as e:
                    logger.warning(f"Could not remove {path.name}: {e}")

        logger.info(f"Cleaned up {removed_count} old records")
        return removed_count

    def get_stats(self) -> Dict[str, Any]:
        total_size = 0
        record_count = 0
        for path in self.lyrics_dir.glob("*.json"):
            total_size += path.stat().st_size
            record_count += 1

        return {
            "total_size_kb": total_size / 1024,
            "record_count": record_count,
            "cache_dir": str(self.lyrics_dir),
        }
