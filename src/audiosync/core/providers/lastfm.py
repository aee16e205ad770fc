"""Last.fm client for related artists and tracks."""

from typing import Any, Dict, List, Optional

import requests

from ...config import LASTFM_BASE_URL, SIMILAR_LIMIT, get_lastfm_api_key
from ...exceptions import ConfigError, DecodeError, ProviderError
from ...utils.logging import get_logger
from ..models import ArtistInfo, SimilarArtist, SimilarSong
from ..text_utils import collapse_spaces
from .http import create_session, fetch_json

logger = get_logger(__name__)


class LastFmClient:
    """``artist.getsimilar``, ``artist.getinfo`` and ``track.getsimilar``.

    Raises ConfigError on the first call when no API key is configured.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = LASTFM_BASE_URL,
        session: Optional[requests.Session] = None,
        limit: int = SIMILAR_LIMIT,
    ):
        self.api_key = api_key if api_key is not None else get_lastfm_api_key()
        self.base_url = base_url
        self.session = session or create_session()
        self.limit = limit

    def _call(self, method: str, **params: Any) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigError("AUDIOSYNC_LASTFM_API_KEY is not set")
        query = {"method": method, "api_key": self.api_key, "format": "json", **params}
        data = fetch_json(self.base_url, params=query, session=self.session)
        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected Last.fm {method} payload")
        if "error" in data:
            # Last.fm reports unknown artists and bad keys in the body
            raise ProviderError(f"Last.fm {method}: {data.get('message') or data['error']}")
        return data

    def similar_artists(self, artist: str) -> List[SimilarArtist]:
        data = self._call("artist.getsimilar", artist=artist, limit=self.limit)
        try:
            entries = (data.get("similarartists") or {}).get("artist") or []
            return [
                SimilarArtist(name=e["name"], url=e.get("url") or "", mbid=e.get("mbid") or "")
                for e in entries
            ]
        except (AttributeError, KeyError, TypeError) as e:
            raise DecodeError(f"Unexpected Last.fm similar artists payload: {e}") from e

    def artist_info(self, artist: str) -> ArtistInfo:
        data = self._call("artist.getinfo", artist=artist, lang="zh")
        try:
            entry = data["artist"]
            bio = entry.get("bio") or {}
            return ArtistInfo(
                name=entry["name"],
                mbid=entry.get("mbid") or "",
                summary=bio.get("summary") or "",
                content=collapse_spaces(bio.get("content") or ""),
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise DecodeError(f"Unexpected Last.fm artist payload: {e}") from e

    def similar_songs(self, track_name: str, artist: str) -> List[SimilarSong]:
        data = self._call("track.getsimilar", track=track_name, artist=artist, limit=self.limit)
        try:
            entries = (data.get("similartracks") or {}).get("track") or []
            return [
                SimilarSong(name=e["name"], artist=e["artist"]["name"], mbid=e.get("mbid") or "")
                for e in entries
            ]
        except (AttributeError, KeyError, TypeError) as e:
            raise DecodeError(f"Unexpected Last.fm similar tracks payload: {e}") from e
