"""Original-language name lookup for tracks tagged with translated names.

Japanese releases are often tagged with Chinese or romanized titles that no
lyric catalog indexes. A chat-completion model is asked for the original
title, album and artist, wrapped in ``<>``, ``[]`` and ``{}`` respectively.
"""

import re
from typing import Optional

import requests

from ..config import REQUEST_TIMEOUT, SILICONFLOW_MODEL, SILICONFLOW_URL, get_siliconflow_api_key
from ..exceptions import OriginalNameError, ProviderError
from ..utils.logging import get_logger
from .models import OriginalName, TrackQuery
from .providers.http import post_json

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are very familiar with Japanese music and proficient in Japanese "
    "(including Japanese-style Romanization). Help me find the original Japanese "
    "song title and artist name. Wrap the song title in <>, Wrap the album title "
    "in [] and the artist name in {},and if there is a year and the word 'live' "
    "they should be retained. Your answer should omit the thinking process and "
    "analysis. Response format example: <涙そうそう 1997 live> [南風] {夏川 りみ} "
)

_TITLE_RE = re.compile(r"<([^<>]*)>")
_ALBUM_RE = re.compile(r"\[([^\[\]]*)\]")
_ARTIST_RE = re.compile(r"\{([^{}]*)\}")


def _first_group(pattern: "re.Pattern[str]", text: str) -> str:
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def parse_original_name(answer: str) -> OriginalName:
    """Pull the wrapped title, album and artist out of a model answer.

    >>> parse_original_name("<涙そうそう> [南風] {夏川 りみ}")
    OriginalName(track_name='涙そうそう', artist='夏川 りみ', album='南風')
    """
    return OriginalName(
        track_name=_first_group(_TITLE_RE, answer),
        artist=_first_group(_ARTIST_RE, answer),
        album=_first_group(_ALBUM_RE, answer),
    )


def build_user_message(query: TrackQuery) -> str:
    return f"歌名: {query.name}, 歌手: {query.artist}, 专辑: {query.album}"


class OriginalNameResolver:
    """Asks the chat-completions endpoint for a track's original names."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = SILICONFLOW_MODEL,
        url: str = SILICONFLOW_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.api_key = api_key if api_key is not None else get_siliconflow_api_key()
        self.model = model
        self.url = url
        self.session = session
        self.timeout = timeout

    def resolve(self, query: TrackQuery) -> OriginalName:
        """Look up original names for a query.

        Raises:
            OriginalNameError: no API key, request failure or unusable answer
        """
        if not self.api_key:
            raise OriginalNameError("No API key configured for original-name lookup")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_message(query)},
            ],
            "stream": False,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            data = post_json(
                self.url, payload, headers=headers, timeout=self.timeout, session=self.session
            )
            answer = data["choices"][0]["message"]["content"]
        except ProviderError as e:
            raise OriginalNameError(f"Original-name lookup failed: {e}") from e
        except (KeyError, IndexError, TypeError) as e:
            raise OriginalNameError(f"Unexpected original-name answer: {e}") from e

        name = parse_original_name(answer or "")
        logger.info(f"Original name for '{query.name}': {name}")
        return name
