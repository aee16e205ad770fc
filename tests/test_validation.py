"""Test validation utilities."""

import pytest

from audiosync.core.models import LyricLine, TrackQuery
from audiosync.exceptions import ValidationError
from audiosync.utils.validation import (
    sanitize_filename,
    validate_lyric_order,
    validate_start_position,
    validate_track_query,
)


class TestValidation:
    """Test validation functions."""

    def test_validate_track_query_valid(self):
        query = TrackQuery("Song", "Artist")
        assert validate_track_query(query) is query

    def test_validate_track_query_invalid(self):
        for query in [TrackQuery("", "Artist"), TrackQuery("Song", "   ")]:
            with pytest.raises(ValidationError):
                validate_track_query(query)

    def test_validate_start_position(self):
        assert validate_start_position(0) == 0
        with pytest.raises(ValidationError):
            validate_start_position(-1)

    def test_validate_lyric_order(self):
        validate_lyric_order([LyricLine(0, "a"), LyricLine(0, "b"), LyricLine(10, "c")])
        with pytest.raises(ValidationError):
            validate_lyric_order([LyricLine(10, "a"), LyricLine(5, "b")])

    def test_sanitize_filename(self):
        assert sanitize_filename('Song: "Live"?') == "Song Live"
        assert len(sanitize_filename("x" * 300)) == 100
