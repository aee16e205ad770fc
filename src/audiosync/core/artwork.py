"""Cover art download through the byte-budgeted cache."""

import asyncio
from typing import Optional

import requests

from ..utils.logging import get_logger
from ..utils.lru_cache import LRUCache, byte_cache
from .providers.http import create_session, fetch_bytes

logger = get_logger(__name__)


class ArtworkFetcher:
    """Downloads images once per URL and keeps them under a byte budget."""

    def __init__(
        self,
        cache: Optional[LRUCache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.cache = cache if cache is not None else byte_cache()
        self.session = session or create_session()

    async def fetch(self, url: str) -> bytes:
        """Image bytes for a URL; concurrent calls share one download.

        Raises:
            NetworkError: the download failed
        """

        async def download() -> bytes:
            logger.debug(f"Downloading artwork {url}")
            return await asyncio.to_thread(fetch_bytes, url, session=self.session)

        return await self.cache.get_or_compute(url, download)
