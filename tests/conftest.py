"""Test configuration and fixtures.

Provides reusable fixtures for:
- Temporary directories and lyric stores
- LRC and QQ-style lyric texts
- Fake provider clients for the resolver
- A manual clock and sleeper for the scheduler
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from audiosync.core.models import LyricLine, LyricPayload, ProviderSong


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Basic Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def lyrics_store(temp_dir):
    from audiosync.utils.cache import LyricsStore

    return LyricsStore(temp_dir)


# =============================================================================
# Lyric Text Fixtures
# =============================================================================


@pytest.fixture
def lrc_original():
    """NetEase-style LRC with headers and a repeated chorus line."""
    return """[ti:Sample]
[ar:Singer]
[by:someone]
[00:01.00]First line
[00:03.50]Second line
[00:05.00][00:09.00]Chorus
[00:07.25]Bridge
"""


@pytest.fixture
def lrc_translation():
    return """[by:translator]
[00:01.00]第一行
[00:03.51]第二行
[00:05.00]副歌
"""


@pytest.fixture
def qq_lyrics_text():
    """QQ-style lyrics with inline translations."""
    return (
        "[00:01.00]Hello【你好】\n"
        "[00:02.50]No translation\n"
        "[00:04.00][00:08.00]Again【再来】\n"
    )


# =============================================================================
# Fake Providers
# =============================================================================


class FakeProvider:
    """In-memory provider client recording every call."""

    def __init__(
        self,
        songs: Optional[List[ProviderSong]] = None,
        payloads: Optional[Dict[str, LyricPayload]] = None,
        covers: Optional[Dict[str, str]] = None,
        search_error: Optional[Exception] = None,
        lyric_error: Optional[Exception] = None,
        cover_errors: Optional[List[Exception]] = None,
    ):
        self.songs = songs or []
        self.payloads = payloads or {}
        self.covers = covers or {}
        self.search_error = search_error
        self.lyric_error = lyric_error
        self.cover_errors = list(cover_errors or [])
        self.search_calls: List[tuple] = []
        self.lyric_calls: List[str] = []
        self.cover_calls: List[str] = []

    def search(self, track_name, artist):
        self.search_calls.append((track_name, artist))
        if self.search_error is not None:
            raise self.search_error
        return list(self.songs)

    def fetch_lyric_payload(self, song_id):
        self.lyric_calls.append(song_id)
        if self.lyric_error is not None:
            raise self.lyric_error
        return self.payloads.get(song_id, LyricPayload(lyric=None))

    def fetch_cover_ref(self, album_id):
        self.cover_calls.append(album_id)
        if self.cover_errors:
            raise self.cover_errors.pop(0)
        return self.covers.get(album_id, "")


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


# =============================================================================
# Scheduler Fixtures
# =============================================================================


class ManualClock:
    """Playback clock the test moves by hand; sleeping advances it."""

    def __init__(self, position_ms: Optional[float] = 0.0):
        self.position_ms = position_ms
        self.sleeps: List[float] = []

    def __call__(self):
        return self.position_ms

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if self.position_ms is not None:
            self.position_ms += seconds * 1000


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def three_lines():
    return [
        LyricLine(0.0, "one"),
        LyricLine(1000.0, "two"),
        LyricLine(2000.0, "three"),
    ]
