"""
Multi-source lyric resolution.

Order of attempts for a track:
1. Original-language names, for genres usually tagged in translation
2. NetEase search, exact match on normalized name/artist/album
3. QQ Music search, same match rule
4. Manual selection among every unmatched search result, with a timeout

Provider failures of any kind degrade to "no match" and the next source is
tried. Only a failed original-name lookup aborts the resolution.
"""

import asyncio
from typing import Callable, Dict, FrozenSet, List, Optional

from ..config import ORIGINAL_NAME_GENRES, SELECTION_TIMEOUT
from ..exceptions import ManualSelectionTimeout, NetworkError, ProviderError
from ..utils.logging import get_logger
from ..utils.lru_cache import LRUCache, count_cache
from .artwork import ArtworkFetcher
from .models import CandidateSong, LyricLine, LyricsDialect, LyricSource, ProviderSong, TrackQuery
from .original_name import OriginalNameResolver
from .parser import parse_with_translation
from .providers import NetEaseClient, ProviderClient, QQMusicClient
from .selection import ManualSelection
from .text_utils import album_matches, any_name_matches, names_match

logger = get_logger(__name__)

CandidatesListener = Callable[[List[CandidateSong]], None]

SOURCE_ORDER = (LyricSource.NETEASE, LyricSource.QQ)


def song_matches(song: ProviderSong, query: TrackQuery) -> bool:
    """Name equal, one of the artists equal, and album equal or contained."""
    return (
        names_match(song.name, query.name)
        and any_name_matches(query.artist, song.artists)
        and album_matches(query.album, song.album)
    )


def dedupe_candidates(candidates: List[CandidateSong]) -> List[CandidateSong]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        unique.append(candidate)
    return unique


def dialect_for(source: LyricSource) -> LyricsDialect:
    if source is LyricSource.NETEASE:
        return LyricsDialect.LRC
    if source is LyricSource.QQ:
        return LyricsDialect.QQ
    raise ValueError(f"Unknown lyric source: {source}")


class LyricsResolver:
    """Finds timed lyrics for a track across NetEase and QQ Music.

    Args:
        netease: NetEase client (blocking calls, run in a worker thread)
        qq: QQ Music client
        original_names: Original-name resolver for translated tags
        artwork: Optional fetcher for the chosen song's cover image
        on_candidates: Called with the candidate list when a manual
            selection is needed
        selection_timeout: Seconds to wait for ``select()``
    """

    def __init__(
        self,
        netease: Optional[ProviderClient] = None,
        qq: Optional[ProviderClient] = None,
        original_names: Optional[OriginalNameResolver] = None,
        artwork: Optional[ArtworkFetcher] = None,
        on_candidates: Optional[CandidatesListener] = None,
        selection_timeout: float = SELECTION_TIMEOUT,
        original_name_genres: FrozenSet[str] = ORIGINAL_NAME_GENRES,
        cover_cache: Optional[LRUCache] = None,
    ):
        self.netease = netease or NetEaseClient()
        self.qq = qq or QQMusicClient()
        self.original_names = original_names or OriginalNameResolver()
        self.artwork = artwork
        self.on_candidates = on_candidates
        self.selection_timeout = selection_timeout
        self.original_name_genres = original_name_genres
        self.cover_cache = cover_cache if cover_cache is not None else count_cache(name="covers")

        self.candidates: List[CandidateSong] = []
        self.cover_art: Optional[bytes] = None
        self._selection = ManualSelection()

    @property
    def awaiting_selection(self) -> bool:
        return self._selection.is_open

    def select(self, candidate: CandidateSong) -> bool:
        """Pick a candidate for the resolution waiting on manual selection.

        Safe to call from any thread. Returns False when nothing is waiting.
        """
        return self._selection.select(candidate)

    def client_for(self, source: LyricSource) -> ProviderClient:
        if source is LyricSource.NETEASE:
            return self.netease
        if source is LyricSource.QQ:
            return self.qq
        raise ValueError(f"Unknown lyric source: {source}")

    # ----------------------
    # Pipeline
    # ----------------------
    async def resolve(self, query: TrackQuery) -> List[LyricLine]:
        """Resolve lyrics for a track, returning [] when none can be found.

        Raises:
            OriginalNameError: the original-name lookup was required and failed
        """
        self._reset()
        query = await self._apply_original_names(query)

        for source in SOURCE_ORDER:
            lines = await self._try_source(source, query)
            if lines:
                return lines

        self.candidates = dedupe_candidates(self.candidates)
        if not self.candidates:
            logger.info(f"❌ No lyrics found for '{query.name}' by {query.artist}")
            return []

        await self._enrich_covers()
        try:
            chosen = await self._await_selection()
        except ManualSelectionTimeout as e:
            logger.warning(f"⚠️ Manual selection timed out: {e}")
            return []

        await self._load_cover(chosen.album_cover)
        return await self.fetch_lyrics_by_id(chosen)

    def _reset(self) -> None:
        self._selection.close()
        self.candidates = []
        self.cover_art = None

    async def _apply_original_names(self, query: TrackQuery) -> TrackQuery:
        if query.genre not in self.original_name_genres:
            return query

        logger.info(f"Looking up original names for '{query.name}' ({query.genre})")
        original = await asyncio.to_thread(self.original_names.resolve, query)
        return query.with_names(
            original.track_name or query.name,
            original.artist or query.artist,
            original.album or query.album,
        )

    async def _try_source(self, source: LyricSource, query: TrackQuery) -> List[LyricLine]:
        client = self.client_for(source)
        try:
            songs = await asyncio.to_thread(client.search, query.name, query.artist)
        except ProviderError as e:
            logger.warning(f"{source.value} search failed: {e}")
            return []
        logger.debug(f"{source.value} returned {len(songs)} songs")

        matched = next((s for s in songs if song_matches(s, query)), None)
        if matched is None:
            logger.info(
                f"❌ No {source.value} match: name={query.name}, artist={query.artist}, album={query.album}"
            )
            self.candidates.extend(CandidateSong.from_provider_song(s, source) for s in songs)
            return []

        logger.info(f"✅ {source.value} match: {matched.name} by {matched.artist}")
        await self._load_cover(await self._cover_url(source, matched))
        try:
            return await self._fetch_lines(source, matched.id)
        except ProviderError as e:
            logger.warning(f"{source.value} lyrics for {matched.id} failed: {e}")
            return []

    async def _fetch_lines(self, source: LyricSource, song_id: str) -> List[LyricLine]:
        client = self.client_for(source)
        payload = await asyncio.to_thread(client.fetch_lyric_payload, song_id)
        return parse_with_translation(payload.lyric, payload.translation, dialect_for(source))

    async def fetch_lyrics_by_id(self, candidate: CandidateSong) -> List[LyricLine]:
        """Fetch and parse lyrics for a chosen candidate; [] on failure."""
        try:
            return await self._fetch_lines(candidate.source, candidate.id)
        except ProviderError as e:
            logger.error(f"Lyrics for {candidate.source.value}:{candidate.id} failed: {e}")
            return []

    # ----------------------
    # Covers
    # ----------------------
    async def _cover_url(self, source: LyricSource, song: ProviderSong) -> str:
        if song.album_cover or source is not LyricSource.QQ:
            return song.album_cover
        return await self._cover_ref(song.album_id)

    async def _cover_ref(self, album_id: str) -> str:
        """Cover URL for a QQ album; "" on failure, which is not cached."""

        async def lookup() -> str:
            return await asyncio.to_thread(self.qq.fetch_cover_ref, album_id)

        try:
            return await self.cover_cache.get_or_compute(album_id, lookup)
        except ProviderError as e:
            logger.debug(f"No cover for album {album_id}: {e}")
            return ""

    async def _enrich_covers(self) -> None:
        """Fill in QQ candidates' covers, one lookup per album."""
        album_ids = sorted({
            c.album_id
            for c in self.candidates
            if c.source is LyricSource.QQ and c.album_id and not c.album_cover
        })
        if not album_ids:
            return

        refs = await asyncio.gather(*(self._cover_ref(a) for a in album_ids))
        covers: Dict[str, str] = dict(zip(album_ids, refs))
        for candidate in self.candidates:
            if candidate.source is LyricSource.QQ and not candidate.album_cover:
                candidate.album_cover = covers.get(candidate.album_id, "")

    async def _load_cover(self, url: str) -> None:
        if self.artwork is None or not url:
            return
        try:
            self.cover_art = await self.artwork.fetch(url)
        except NetworkError as e:
            logger.debug(f"Cover download failed: {e}")

    # ----------------------
    # Manual selection
    # ----------------------
    async def _await_selection(self) -> CandidateSong:
        self._selection.open()
        logger.info(f"Waiting for manual selection among {len(self.candidates)} candidates")
        if self.on_candidates is not None:
            self.on_candidates(list(self.candidates))
        chosen = await self._selection.wait(self.selection_timeout)
        logger.info(f"Selected {chosen.source.value}:{chosen.id} {chosen.name}")
        return chosen
