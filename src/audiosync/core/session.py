"""Playback session: stored or resolved lyrics handed to the scheduler."""

from typing import List, Optional

from ..exceptions import CacheError
from ..utils.cache import LyricsStore
from ..utils.logging import get_logger
from .models import LyricLine, TrackQuery
from .parser import finalize_lyrics
from .resolver import LyricsResolver
from .scheduler import PlaybackScheduler

logger = get_logger(__name__)


class LyricsSession:
    """Loads lyrics for the current track and starts following playback.

    Stored lyrics are used as-is. Freshly resolved lyrics get the end-of-song
    line appended and are saved before the scheduler takes over.
    """

    def __init__(
        self,
        resolver: LyricsResolver,
        scheduler: PlaybackScheduler,
        store: Optional[LyricsStore] = None,
    ):
        self.resolver = resolver
        self.scheduler = scheduler
        self.store = store
        self.query: Optional[TrackQuery] = None
        self.from_store = False

    @property
    def lines(self) -> List[LyricLine]:
        return self.scheduler.sequence

    async def load(self, query: TrackQuery) -> List[LyricLine]:
        """Load lyrics for a track and start the scheduler.

        Returns the sequence handed to the scheduler ([] when none found).

        Raises:
            OriginalNameError: the original-name lookup was required and failed
        """
        self.query = query
        stored = self._load_stored(query)
        if stored:
            self.from_store = True
            logger.info(f"Using stored lyrics for '{query.name}' ({len(stored)} lines)")
            return self._play(stored)

        self.from_store = False
        lines = finalize_lyrics(await self.resolver.resolve(query))
        if lines:
            self._save(query, lines)
        return self._play(lines)

    async def refetch(self) -> List[LyricLine]:
        """Forget the stored lyrics for the current track and resolve again."""
        if self.query is None:
            return []
        self._forget(self.query)
        return await self.load(self.query)

    async def resolve_with_name(self, track_name: str) -> List[LyricLine]:
        """Resolve again with a user-corrected track name."""
        if self.query is None:
            return []
        query = self.query.with_names(track_name, self.query.artist, self.query.album)
        self._forget(query)
        return await self.load(query)

    def stop(self) -> None:
        self.scheduler.stop()

    def _load_stored(self, query: TrackQuery) -> Optional[List[LyricLine]]:
        if self.store is None or not query.track_id:
            return None
        try:
            return self.store.load_lyrics(query.track_id)
        except CacheError as e:
            logger.warning(f"Ignoring stored lyrics: {e}")
            return None

    def _forget(self, query: TrackQuery) -> None:
        if self.store is None or not query.track_id:
            return
        try:
            self.store.delete_lyrics(query.track_id)
        except CacheError as e:
            logger.warning(f"Could not clear stored lyrics: {e}")

    def _save(self, query: TrackQuery, lines: List[LyricLine]) -> None:
        if self.store is None or not query.track_id:
            return
        try:
            self.store.save_lyrics(query.track_id, query.name, lines)
        except CacheError as e:
            logger.warning(f"Could not store lyrics: {e}")

    def _play(self, lines: List[LyricLine]) -> List[LyricLine]:
        self.scheduler.load(lines)
        self.scheduler.start()
        return lines
