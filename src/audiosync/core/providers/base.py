"""Interface every lyric provider client exposes to the resolver."""

from typing import List, Protocol

from ..models import LyricPayload, ProviderSong


class ProviderClient(Protocol):
    """Blocking client for one lyric source.

    Implementations raise ``NetworkError`` or ``DecodeError`` on failure;
    the resolver decides whether that is fatal.
    """

    def search(self, track_name: str, artist: str) -> List[ProviderSong]:
        """Search the catalog for a track."""
        ...

    def fetch_lyric_payload(self, song_id: str) -> LyricPayload:
        """Fetch raw lyric text (and translation) for a song id."""
        ...

    def fetch_cover_ref(self, album_id: str) -> str:
        """Resolve an album id to a cover image URL, or "" if unknown."""
        ...
