"""Related artists and tracks for whatever is playing."""

import asyncio
from typing import Iterable, List, Optional

from ..exceptions import ProviderError
from ..utils.logging import get_logger
from ..utils.lru_cache import LRUCache, count_cache
from .artwork import ArtworkFetcher
from .models import ArtistInfo, SimilarArtist, SimilarSong
from .providers import LastFmClient, NetEaseClient

logger = get_logger(__name__)


class ArtistDirectory:
    """Last.fm recommendations with NetEase artist portraits.

    Portrait URLs are cached per artist name and the image bytes go through
    the artwork fetcher's byte budget. Failed or empty portrait lookups are
    not cached.
    """

    def __init__(
        self,
        lastfm: Optional[LastFmClient] = None,
        netease: Optional[NetEaseClient] = None,
        artwork: Optional[ArtworkFetcher] = None,
        portrait_cache: Optional[LRUCache] = None,
    ):
        self.lastfm = lastfm or LastFmClient()
        self.netease = netease or NetEaseClient()
        self.artwork = artwork or ArtworkFetcher()
        self.portrait_cache = portrait_cache if portrait_cache is not None else count_cache(name="portraits")

    async def portrait(self, artist: str) -> Optional[bytes]:
        """Artist portrait bytes, or None when NetEase has none."""

        async def lookup() -> str:
            return await asyncio.to_thread(self.netease.fetch_artist_picture, artist)

        try:
            url = await self.portrait_cache.get_or_compute(artist, lookup)
            if not url:
                self.portrait_cache.discard(artist)
                return None
            return await self.artwork.fetch(url)
        except ProviderError as e:
            logger.debug(f"No portrait for {artist}: {e}")
            return None

    async def artist_info(self, artist: str) -> ArtistInfo:
        return await asyncio.to_thread(self.lastfm.artist_info, artist)

    async def similar_artists(self, artist: str, with_details: bool = True) -> List[SimilarArtist]:
        """Artists related to ``artist``.

        With ``with_details`` every entry also gets its portrait and
        biography, fetched concurrently; a failed detail leaves the field
        empty.

        Raises:
            ConfigError: no Last.fm API key
            ProviderError: the recommendation request failed
        """
        artists = await asyncio.to_thread(self.lastfm.similar_artists, artist)
        if with_details and artists:
            await asyncio.gather(*(self._fill_details(a) for a in artists))
        logger.info(f"Found {len(artists)} artists similar to {artist}")
        return artists

    async def _fill_details(self, artist: SimilarArtist) -> None:
        image, bio = await asyncio.gather(self.portrait(artist.name), self._bio(artist.name))
        if image is not None:
            artist.image = image
        if bio:
            artist.bio = bio

    async def _bio(self, artist: str) -> str:
        try:
            return (await self.artist_info(artist)).content
        except ProviderError as e:
            logger.debug(f"No biography for {artist}: {e}")
            return ""

    async def similar_songs(
        self, track_name: str, artist: str, alternate_names: Iterable[str] = ()
    ) -> List[SimilarSong]:
        """Tracks related to a track.

        ``alternate_names`` are other spellings of the title (e.g. a
        traditional-script variant). All spellings are queried concurrently
        and the first non-empty answer, in the order given, wins.
        """
        names = list(dict.fromkeys(n for n in (track_name, *alternate_names) if n))
        results = await asyncio.gather(
            *(asyncio.to_thread(self.lastfm.similar_songs, name, artist) for name in names)
        )
        for songs in results:
            if songs:
                return songs
        logger.info(f"No similar tracks for '{track_name}' by {artist}")
        return []
