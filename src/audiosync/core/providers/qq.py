"""QQ Music client (inline-tag lyrics with 【translation】 suffixes)."""

import base64
import binascii
from typing import Any, List, Optional

import requests

from ...config import PROVIDER_SEARCH_LIMIT, QQ_BASE_URL
from ...exceptions import DecodeError
from ...utils.logging import get_logger
from ..models import LyricPayload, ProviderSong
from ..text_utils import decode_xml_entities, strip_jsonp
from .http import create_session, decode_json, fetch_json, fetch_text

logger = get_logger(__name__)

LYRIC_REFERER = "https://y.qq.com/portal/player.html"


def _decode_jsonp(raw_text: str, source: str) -> Any:
    try:
        body = strip_jsonp(raw_text)
    except ValueError as e:
        raise DecodeError(f"Malformed JSONP in {source}: {e}") from e
    return decode_json(body, source)


def _decode_lyric_field(value: Optional[str]) -> Optional[str]:
    """Base64 lyric field to text, with XML entities resolved."""
    if not value:
        return None
    try:
        text = base64.b64decode(value).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise DecodeError(f"Malformed base64 lyric: {e}") from e
    return decode_xml_entities(text) or None


def _parse_song(song: dict) -> ProviderSong:
    return ProviderSong(
        id=song["songmid"],
        name=song["songname"],
        artists=[s["name"] for s in song.get("singer") or []],
        album=song.get("albumname") or "",
        album_id=song.get("albummid") or "",
    )


class QQMusicClient:
    """Search, lyric and album endpoints of QQ Music.

    Search results carry no cover URL; ``fetch_cover_ref`` resolves it from
    the album mid in a second request.
    """

    def __init__(
        self,
        base_url: str = QQ_BASE_URL,
        session: Optional[requests.Session] = None,
        limit: int = PROVIDER_SEARCH_LIMIT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_session()
        self.limit = limit

    def search(self, track_name: str, artist: str) -> List[ProviderSong]:
        url = f"{self.base_url}/soso/fcgi-bin/client_search_cp"
        params = {"p": 1, "n": self.limit, "w": f"{track_name} {artist}"}
        logger.debug(f"qq search: {params['w']}")
        raw = fetch_text(url, params=params, session=self.session)
        data = _decode_jsonp(raw, url)
        try:
            songs = data["data"]["song"]["list"] or []
            return [_parse_song(s) for s in songs]
        except (KeyError, TypeError) as e:
            raise DecodeError(f"Unexpected qq search payload: {e}") from e

    def fetch_lyric_payload(self, song_id: str) -> LyricPayload:
        url = f"{self.base_url}/lyric/fcgi-bin/fcg_query_lyric_new.fcg"
        params = {"songmid": song_id, "g_tk": 5381}
        raw = fetch_text(
            url, params=params, headers={"Referer": LYRIC_REFERER}, session=self.session
        )
        data = _decode_jsonp(raw, url)
        if not isinstance(data, dict):
            raise DecodeError("Unexpected qq lyric payload")
        return LyricPayload(
            lyric=_decode_lyric_field(data.get("lyric")),
            translation=_decode_lyric_field(data.get("trans")),
        )

    def fetch_cover_ref(self, album_id: str) -> str:
        """Album cover URL for an album mid; "" when the album has none.

        Raises:
            NetworkError: request failed
            DecodeError: response is not an album page
        """
        if not album_id:
            return ""
        url = f"{self.base_url}/v8/fcg-bin/musicmall.fcg"
        params = {
            "albummid": album_id,
            "format": "json",
            "inCharset": "utf-8",
            "outCharset": "utf-8",
            "cmd": "get_album_buy_page",
        }
        data = fetch_json(url, params=params, session=self.session)
        try:
            pictures = data["data"]["headpiclist"]
            if not pictures:
                return ""
            return pictures[0]["picurl"] or ""
        except (KeyError, TypeError) as e:
            raise DecodeError(f"Unexpected qq album payload: {e}") from e
