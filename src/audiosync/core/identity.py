"""Track identity lookup against the iTunes Search API."""

import asyncio
from typing import Optional

import requests

from ..config import IDENTITY_CACHE_SIZE, ITUNES_SEARCH_URL
from ..exceptions import DecodeError
from ..utils.logging import get_logger
from ..utils.lru_cache import LRUCache, count_cache
from .models import TrackIdentity
from .providers.http import create_session, fetch_json
from .text_utils import fingerprint

logger = get_logger(__name__)


def parse_identity(data: dict) -> Optional[TrackIdentity]:
    """First search result as a ``TrackIdentity``, or None when empty."""
    try:
        results = data.get("results") or []
        if not results:
            return None
        item = results[0]
        return TrackIdentity(
            track_id=int(item["trackId"]),
            artist_id=int(item["artistId"]),
            track_name=item.get("trackName", ""),
            artist_name=item.get("artistName", ""),
            collection_name=item.get("collectionName", ""),
            artwork_url=item.get("artworkUrl100", ""),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Unexpected iTunes payload: {e}") from e


class IdentityLookup:
    """Finds catalog ids for a (track, artist) pair, one request per key.

    Misses are not cached so a later lookup can retry.
    """

    def __init__(
        self,
        cache: Optional[LRUCache] = None,
        session: Optional[requests.Session] = None,
        url: str = ITUNES_SEARCH_URL,
    ):
        self.cache = cache if cache is not None else count_cache(IDENTITY_CACHE_SIZE, name="identity")
        self.session = session or create_session()
        self.url = url

    def search(self, name: str, artist: str, country_code: str = "cn") -> Optional[TrackIdentity]:
        """Blocking iTunes search for the best match."""
        params = {
            "term": f"{name} {artist}",
            "entity": "musicTrack",
            "media": "music",
            "limit": 1,
            "country": country_code,
        }
        data = fetch_json(self.url, params=params, session=self.session)
        return parse_identity(data)

    async def lookup(self, name: str, artist: str, country_code: str = "cn") -> Optional[TrackIdentity]:
        """Cached identity for a track; concurrent lookups share one request."""
        key = fingerprint(name, artist, country_code)

        async def compute() -> Optional[TrackIdentity]:
            return await asyncio.to_thread(self.search, name, artist, country_code)

        identity = await self.cache.get_or_compute(key, compute)
        if identity is None:
            self.cache.discard(key)
            logger.info(f"No catalog entry for '{name}' by {artist}")
        return identity
