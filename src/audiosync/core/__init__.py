"""Core functionality modules.

Only the data models are imported eagerly; submodules that talk to the
network pull in ``requests`` when they are imported themselves.
"""

from .models import (
    ArtistInfo,
    CandidateSong,
    LyricLine,
    LyricPayload,
    LyricsDialect,
    LyricSource,
    OriginalName,
    ProviderSong,
    SimilarArtist,
    SimilarSong,
    SongRecord,
    TrackIdentity,
    TrackQuery,
)
