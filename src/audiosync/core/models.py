"""Data models for lyric timelines and lyric resolution."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class LyricSource(str, Enum):
    """Lyric provider a song record came from."""

    NETEASE = "netease"
    QQ = "qq"


class LyricsDialect(str, Enum):
    """Raw timed-text formats understood by the parser."""

    LRC = "lrc"  # bracket-prefixed lines, NetEase style
    QQ = "qq"  # inline tags with an optional 【translation】 suffix


@dataclass(frozen=True)
class LyricLine:
    """A single timed lyric line."""

    start_time_ms: float
    text: str
    translation: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def with_translation(self, translation: Optional[str]) -> "LyricLine":
        return replace(self, translation=translation)


@dataclass(frozen=True)
class TrackQuery:
    """What the player reports about the track we need lyrics for."""

    name: str
    artist: str
    album: str = ""
    genre: str = ""
    track_id: str = ""

    def with_names(self, name: str, artist: str, album: str) -> "TrackQuery":
        return replace(self, name=name, artist=artist, album=album)


@dataclass(frozen=True)
class ProviderSong:
    """Provider search result, reduced to the fields matching needs."""

    id: str
    name: str
    artists: List[str]
    album: str
    album_id: str = ""
    album_cover: str = ""

    @property
    def artist(self) -> str:
        return ", ".join(self.artists)


@dataclass(frozen=True)
class LyricPayload:
    """Raw lyric text as a provider returns it."""

    lyric: Optional[str]
    translation: Optional[str] = None


@dataclass
class CandidateSong:
    """An unmatched search result kept for manual selection."""

    id: str
    name: str
    artist: str
    album: str
    album_id: str
    album_cover: str
    source: LyricSource

    @classmethod
    def from_provider_song(cls, song: ProviderSong, source: LyricSource) -> "CandidateSong":
        return cls(
            id=song.id,
            name=song.name,
            artist=song.artist,
            album=song.album,
            album_id=song.album_id,
            album_cover=song.album_cover,
            source=source,
        )


@dataclass(frozen=True)
class OriginalName:
    """Original-language names returned by the name lookup."""

    track_name: str = ""
    artist: str = ""
    album: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.track_name or self.artist or self.album)


@dataclass(frozen=True)
class TrackIdentity:
    """Catalog identity of a track (iTunes Search API)."""

    track_id: int
    artist_id: int
    track_name: str
    artist_name: str
    collection_name: str
    artwork_url: str


@dataclass
class SongRecord:
    """Persisted lyrics for one player track."""

    track_id: str
    track_name: str
    lines: List[LyricLine] = field(default_factory=list)
    saved_at: float = 0.0


@dataclass
class SimilarArtist:
    """Artist Last.fm relates to the one playing, with optional details."""

    name: str
    url: str = ""
    mbid: str = ""
    image: Optional[bytes] = None
    bio: str = ""


@dataclass(frozen=True)
class ArtistInfo:
    """Last.fm artist biography."""

    name: str
    mbid: str = ""
    summary: str = ""
    content: str = ""


@dataclass(frozen=True)
class SimilarSong:
    """Track Last.fm relates to the one playing."""

    name: str
    artist: str = ""
    mbid: str = ""
