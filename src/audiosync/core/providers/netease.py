"""NetEase Cloud Music client (bracket-prefixed LRC lyrics)."""

from typing import Any, List, Optional

import requests

from ...config import NETEASE_BASE_URL, PROVIDER_SEARCH_LIMIT
from ...exceptions import DecodeError
from ...utils.logging import get_logger
from ..models import LyricPayload, ProviderSong
from .http import create_session, fetch_json

logger = get_logger(__name__)


def _lyric_text(block: Any) -> Optional[str]:
    if not isinstance(block, dict):
        return None
    return block.get("lyric") or None


def _parse_song(song: dict) -> ProviderSong:
    album = song.get("al") or {}
    return ProviderSong(
        id=str(song["id"]),
        name=song["name"],
        artists=[a["name"] for a in song.get("ar") or []],
        album=album.get("name") or "",
        album_id=str(album.get("id", "")),
        album_cover=album.get("picUrl") or "",
    )


class NetEaseClient:
    """Search and lyric endpoints of a NetEase Cloud Music API deployment."""

    def __init__(
        self,
        base_url: str = NETEASE_BASE_URL,
        session: Optional[requests.Session] = None,
        limit: int = PROVIDER_SEARCH_LIMIT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_session()
        self.limit = limit

    def search(self, track_name: str, artist: str) -> List[ProviderSong]:
        url = f"{self.base_url}/cloudsearch"
        params = {"keywords": f"{track_name} {artist}", "limit": self.limit}
        logger.debug(f"netease search: {params['keywords']}")
        data = fetch_json(url, params=params, session=self.session)
        try:
            songs = (data.get("result") or {}).get("songs") or []
            return [_parse_song(s) for s in songs]
        except (AttributeError, KeyError, TypeError) as e:
            raise DecodeError(f"Unexpected netease search payload: {e}") from e

    def fetch_lyric_payload(self, song_id: str) -> LyricPayload:
        url = f"{self.base_url}/lyric"
        data = fetch_json(url, params={"id": song_id}, session=self.session)
        if not isinstance(data, dict):
            raise DecodeError("Unexpected netease lyric payload")
        return LyricPayload(
            lyric=_lyric_text(data.get("lrc")),
            translation=_lyric_text(data.get("tlyric")),
        )

    def fetch_cover_ref(self, album_id: str) -> str:
        # Search results already carry the album cover URL
        return ""

    def fetch_artist_picture(self, artist: str) -> str:
        """Portrait URL of the best artist match; "" when nothing matches."""
        url = f"{self.base_url}/cloudsearch"
        params = {"keywords": artist, "limit": 1, "type": 100}
        data = fetch_json(url, params=params, session=self.session)
        try:
            artists = (data.get("result") or {}).get("artists") or []
            if not artists:
                return ""
            return artists[0].get("picUrl") or ""
        except (AttributeError, TypeError) as e:
            raise DecodeError(f"Unexpected netease artist payload: {e}") from e
