"""Tests for multi-source lyric resolution with fake providers."""

import asyncio
import threading

import pytest

from audiosync.core.models import CandidateSong, LyricPayload, LyricSource, OriginalName, ProviderSong, TrackQuery
from audiosync.core.resolver import LyricsResolver, dedupe_candidates, song_matches
from audiosync.exceptions import DecodeError, NetworkError, OriginalNameError

NETEASE_LRC = "[00:01.00]first\n[00:02.00]second"
NETEASE_TRANS = "[00:01.00]第一"
QQ_LYRIC = "[00:03.00]qq line【翻译】"


class FakeOriginalNames:
    def __init__(self, name=None, error=None):
        self.name = name or OriginalName()
        self.error = error
        self.queries = []

    def resolve(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.name


def _song(song_id, name="Song", artists=("Artist",), album="Album", album_id="", cover=""):
    return ProviderSong(song_id, name, list(artists), album, album_id, cover)


def _resolver(netease, qq, **kwargs):
    kwargs.setdefault("original_names", FakeOriginalNames())
    kwargs.setdefault("selection_timeout", 0.05)
    return LyricsResolver(netease=netease, qq=qq, **kwargs)


def _resolve(resolver, query):
    return asyncio.run(resolver.resolve(query))


QUERY = TrackQuery(name="Song (Live)", artist="Artist", album="Album")


def test_song_matches_rules():
    song = _song("1", name="song （live）", artists=("Other", "artist"), album="Album (Deluxe)")
    assert song_matches(song, QUERY)
    assert not song_matches(_song("1", name="Song"), QUERY)
    assert not song_matches(_song("1", name="Song (Live)", artists=("Nobody",)), QUERY)


def test_dedupe_keeps_first():
    a = CandidateSong("1", "a", "", "", "", "", LyricSource.NETEASE)
    b = CandidateSong("1", "b", "", "", "", "", LyricSource.QQ)
    c = CandidateSong("2", "c", "", "", "", "", LyricSource.QQ)
    assert dedupe_candidates([a, b, c]) == [a, c]


def test_netease_match_short_circuits(fake_provider_cls):
    netease = fake_provider_cls(
        songs=[_song("n1", name="song （live）")],
        payloads={"n1": LyricPayload(NETEASE_LRC, NETEASE_TRANS)},
    )
    qq = fake_provider_cls()

    lines = _resolve(_resolver(netease, qq), QUERY)

    assert [l.text for l in lines] == ["first", "second"]
    assert lines[0].translation == "第一"
    assert qq.search_calls == []


def test_netease_failure_falls_through_to_qq(fake_provider_cls):
    netease = fake_provider_cls(search_error=NetworkError("down"))
    qq = fake_provider_cls(
        songs=[_song("q1", name="Song (Live)")],
        payloads={"q1": LyricPayload(QQ_LYRIC)},
    )

    lines = _resolve(_resolver(netease, qq), QUERY)

    assert lines[0].text == "qq line"
    assert lines[0].translation == "翻译"


def test_matched_song_with_broken_lyrics_falls_through(fake_provider_cls):
    netease = fake_provider_cls(songs=[_song("n1", name="Song (Live)")], lyric_error=DecodeError("bad"))
    qq = fake_provider_cls(songs=[_song("q1", name="Song (Live)")], payloads={"q1": LyricPayload(QQ_LYRIC)})

    lines = _resolve(_resolver(netease, qq), QUERY)

    assert netease.lyric_calls == ["n1"]
    assert lines[0].text == "qq line"


def test_manual_selection_picks_candidate(fake_provider_cls):
    netease = fake_provider_cls(songs=[_song("n1", name="Other"), _song("n1", name="Other again")])
    qq = fake_provider_cls(
        songs=[_song("q1", name="Different", album_id="a1"), _song("q2", name="Another", album_id="a1")],
        payloads={"q1": LyricPayload(QQ_LYRIC)},
        covers={"a1": "http://cover"},
    )
    published = []
    resolver = _resolver(netease, qq, selection_timeout=2.0)

    def on_candidates(candidates):
        published.append(candidates)
        assert resolver.awaiting_selection
        resolver.select(candidates[1])

    resolver.on_candidates = on_candidates
    lines = _resolve(resolver, QUERY)

    candidates = published[0]
    assert [c.id for c in candidates] == ["n1", "q1", "q2"]
    assert candidates[1].source is LyricSource.QQ
    assert candidates[1].album_cover == "http://cover"
    assert qq.cover_calls == ["a1"]
    assert qq.lyric_calls == ["q1"]
    assert lines[0].text == "qq line"


def test_selection_from_another_thread(fake_provider_cls):
    netease = fake_provider_cls(
        songs=[_song("n9", name="Nope")],
        payloads={"n9": LyricPayload(NETEASE_LRC)},
    )
    resolver = _resolver(netease, fake_provider_cls(), selection_timeout=2.0)
    resolver.on_candidates = lambda candidates: threading.Timer(
        0.01, resolver.select, args=(candidates[0],)
    ).start()

    lines = _resolve(resolver, QUERY)

    assert [l.text for l in lines] == ["first", "second"]


def test_selection_timeout_returns_empty(fake_provider_cls):
    netease = fake_provider_cls(songs=[_song("n1", name="Other")])
    published = []
    resolver = _resolver(netease, fake_provider_cls(), on_candidates=published.append)

    assert _resolve(resolver, QUERY) == []
    assert len(published) == 1
    assert not resolver.awaiting_selection
    assert resolver.select(published[0][0]) is False


def test_no_candidates_returns_empty(fake_provider_cls):
    published = []
    resolver = _resolver(fake_provider_cls(), fake_provider_cls(), on_candidates=published.append)

    assert _resolve(resolver, QUERY) == []
    assert published == []
    assert resolver.candidates == []


def test_original_names_replace_query(fake_provider_cls):
    netease = fake_provider_cls(
        songs=[_song("n1", name="涙そうそう", artists=("夏川りみ",), album="南風")],
        payloads={"n1": LyricPayload(NETEASE_LRC)},
    )
    original_names = FakeOriginalNames(OriginalName("涙そうそう", "夏川りみ", ""))
    resolver = _resolver(netease, fake_provider_cls(), original_names=original_names)
    query = TrackQuery(name="泪光闪闪", artist="夏川里美", album="南風", genre="J-Pop")

    lines = _resolve(resolver, query)

    assert lines
    assert netease.search_calls == [("涙そうそう", "夏川りみ")]


def test_original_name_lookup_skipped_for_other_genres(fake_provider_cls):
    original_names = FakeOriginalNames(error=OriginalNameError("should not run"))
    resolver = _resolver(fake_provider_cls(), fake_provider_cls(), original_names=original_names)

    assert _resolve(resolver, TrackQuery("Song", "Artist", genre="Rock")) == []
    assert original_names.queries == []


def test_original_name_failure_is_fatal(fake_provider_cls):
    netease = fake_provider_cls()
    original_names = FakeOriginalNames(error=OriginalNameError("no key"))
    resolver = _resolver(netease, fake_provider_cls(), original_names=original_names)

    with pytest.raises(OriginalNameError):
        _resolve(resolver, TrackQuery("Song", "Artist", genre="J-Rock"))
    assert netease.search_calls == []


def test_fetch_lyrics_by_id_failure_is_empty(fake_provider_cls):
    qq = fake_provider_cls(lyric_error=NetworkError("down"))
    resolver = _resolver(fake_provider_cls(), qq)
    candidate = CandidateSong("q1", "Song", "Artist", "Album", "", "", LyricSource.QQ)

    assert asyncio.run(resolver.fetch_lyrics_by_id(candidate)) == []
    assert qq.lyric_calls == ["q1"]


def test_candidates_cleared_between_resolutions(fake_provider_cls):
    netease = fake_provider_cls(songs=[_song("n1", name="Other")])
    resolver = _resolver(netease, fake_provider_cls())
    _resolve(resolver, QUERY)
    assert [c.id for c in resolver.candidates] == ["n1"]

    netease.songs = []
    _resolve(resolver, QUERY)
    assert resolver.candidates == []


def test_failed_cover_lookup_is_not_cached(fake_provider_cls):
    qq = fake_provider_cls(covers={"alb1": "http://cover"}, cover_errors=[NetworkError("timeout")])
    resolver = _resolver(fake_provider_cls(), qq)

    async def lookups():
        return [await resolver._cover_ref("alb1"), await resolver._cover_ref("alb1")]

    assert asyncio.run(lookups()) == ["", "http://cover"]
    assert qq.cover_calls == ["alb1", "alb1"]
    assert resolver.cover_cache.get("alb1") == "http://cover"
