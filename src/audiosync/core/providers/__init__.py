"""Lyric and metadata provider clients."""

from .base import ProviderClient
from .lastfm import LastFmClient
from .netease import NetEaseClient
from .qq import QQMusicClient

__all__ = ["ProviderClient", "LastFmClient", "NetEaseClient", "QQMusicClient"]
