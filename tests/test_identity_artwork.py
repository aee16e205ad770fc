"""Tests for the iTunes identity lookup and artwork fetcher."""

import asyncio
import json
from unittest.mock import Mock

import pytest

from audiosync.core.artwork import ArtworkFetcher
from audiosync.core.identity import IdentityLookup, parse_identity
from audiosync.exceptions import DecodeError
from audiosync.utils.lru_cache import byte_cache

ITUNES_RESULT = {
    "results": [
        {
            "artistId": 11,
            "trackId": 22,
            "artistName": "Artist",
            "trackName": "Song",
            "collectionName": "Album",
            "artworkUrl100": "http://art/100x100.jpg",
        }
    ]
}


def _session(payload):
    response = Mock(text=json.dumps(payload), encoding="utf-8")
    response.raise_for_status = Mock()
    session = Mock()
    session.get = Mock(return_value=response)
    return session


class TestParseIdentity:
    def test_first_result(self):
        identity = parse_identity(ITUNES_RESULT)
        assert identity.track_id == 22
        assert identity.artist_id == 11
        assert identity.artwork_url == "http://art/100x100.jpg"

    def test_no_results(self):
        assert parse_identity({"results": []}) is None

    def test_missing_ids(self):
        with pytest.raises(DecodeError):
            parse_identity({"results": [{"trackName": "x"}]})


class TestIdentityLookup:
    def test_lookup_is_cached_by_fingerprint(self):
        session = _session(ITUNES_RESULT)
        lookup = IdentityLookup(session=session)

        async def run():
            first = await lookup.lookup("Song", "Artist")
            second = await lookup.lookup("song", "ARTIST")
            return first, second

        first, second = asyncio.run(run())

        assert first == second
        assert session.get.call_count == 1
        assert session.get.call_args[1]["params"]["country"] == "cn"

    def test_misses_are_not_cached(self):
        session = _session({"results": []})
        lookup = IdentityLookup(session=session)

        assert asyncio.run(lookup.lookup("Song", "Artist")) is None
        assert asyncio.run(lookup.lookup("Song", "Artist")) is None
        assert session.get.call_count == 2
        assert len(lookup.cache) == 0


class TestArtworkFetcher:
    def test_concurrent_fetches_download_once(self):
        response = Mock(content=b"image")
        response.raise_for_status = Mock()
        session = Mock()
        session.get = Mock(return_value=response)
        fetcher = ArtworkFetcher(cache=byte_cache(100), session=session)

        async def run():
            return await asyncio.gather(*(fetcher.fetch("http://art") for _ in range(3)))

        assert asyncio.run(run()) == [b"image"] * 3
        assert session.get.call_count == 1
        assert fetcher.cache.total_size == 5
