"""Command-line interface using Click."""

import asyncio
import json
import sys
import threading
from pathlib import Path
from typing import List, Optional

import click

from . import __version__
from .config import STORE_MAX_AGE_DAYS, get_cache_dir
from .exceptions import AudioSyncError
from .core.artists import ArtistDirectory
from .core.artwork import ArtworkFetcher
from .core.identity import IdentityLookup
from .core.models import CandidateSong, LyricLine, LyricsDialect, TrackQuery
from .core.parser import parse_with_translation
from .core.resolver import LyricsResolver
from .core.scheduler import MonotonicClock, PlaybackScheduler
from .core.serialization import lines_to_json
from .core.session import LyricsSession
from .utils.cache import LyricsStore
from .utils.logging import setup_logging
from .utils.validation import validate_start_position, validate_track_query


def format_timestamp(ms: float) -> str:
    total = max(0.0, ms) / 1000
    minutes = int(total // 60)
    return f"{minutes:02d}:{total - minutes * 60:05.2f}"


def format_line(line: LyricLine) -> str:
    text = f"[{format_timestamp(line.start_time_ms)}] {line.text}"
    if line.translation:
        text += f"  ({line.translation})"
    return text


def echo_lines(lines: List[LyricLine], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(lines_to_json(lines), ensure_ascii=False, indent=2))
        return
    for line in lines:
        click.echo(format_line(line))


def prompt_for_candidate(resolver: LyricsResolver, candidates: List[CandidateSong]) -> None:
    """Ask on the terminal which candidate to use, off the event loop."""

    def ask() -> None:
        click.echo("No exact match. Candidates:")
        for i, c in enumerate(candidates, start=1):
            click.echo(f"  {i}. {c.name} - {c.artist} [{c.album}] ({c.source.value})")
        choice = click.prompt(
            f"Pick one within {resolver.selection_timeout:g}s (0 to skip)",
            type=click.IntRange(0, len(candidates)),
            default=0,
        )
        if choice:
            resolver.select(candidates[choice - 1])

    threading.Thread(target=ask, daemon=True).start()


def build_resolver(interactive: bool = True) -> LyricsResolver:
    resolver = LyricsResolver(artwork=ArtworkFetcher())
    if interactive:
        resolver.on_candidates = lambda candidates: prompt_for_candidate(resolver, candidates)
    return resolver


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(), help='Log to file')
@click.pass_context
def cli(ctx, verbose, log_file):
    """AudioSync - synced lyrics for whatever is playing."""
    ctx.ensure_object(dict)
    logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose
    )
    ctx.obj['logger'] = logger
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('lyrics_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--dialect', type=click.Choice([d.value for d in LyricsDialect]), default='lrc',
              help='Timed-text format of the file')
@click.option('--translation', 'translation_file', type=click.Path(exists=True, dir_okay=False),
              help='Translation file in the same format')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of text')
def parse(lyrics_file, dialect, translation_file, as_json):
    """Parse a lyric file and print its timeline."""
    text = Path(lyrics_file).read_text(encoding='utf-8')
    translation = Path(translation_file).read_text(encoding='utf-8') if translation_file else None
    lines = parse_with_translation(text, translation, LyricsDialect(dialect))
    echo_lines(lines, as_json)


@cli.command()
@click.argument('title')
@click.argument('artist')
@click.option('--album', default='', help='Album name used for matching')
@click.option('--genre', default='', help='Genre reported by the player')
@click.option('--track-id', default='', help='Player track id')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of text')
@click.pass_context
def resolve(ctx, title, artist, album, genre, track_id, as_json):
    """Find timed lyrics for a track."""
    logger = ctx.obj['logger']
    try:
        query = validate_track_query(
            TrackQuery(name=title, artist=artist, album=album, genre=genre, track_id=track_id)
        )
        lines = asyncio.run(build_resolver().resolve(query))
    except AudioSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    if not lines:
        click.echo("No lyrics found")
        sys.exit(1)
    echo_lines(lines, as_json)


async def run_playback(
    session: LyricsSession, clock: MonotonicClock, query: TrackQuery, start_ms: float = 0.0
) -> List[LyricLine]:
    """Load lyrics, then follow the clock until the last line."""
    lines = await session.load(query)
    # Time spent resolving and waiting for a selection is not playback
    clock.seek(start_ms)
    await session.scheduler.wait()
    return lines


@cli.command()
@click.argument('title')
@click.argument('artist')
@click.option('--album', default='', help='Album name used for matching')
@click.option('--genre', default='', help='Genre reported by the player')
@click.option('--track-id', default='', help='Player track id (enables the local store)')
@click.option('--start-ms', type=float, default=0.0, help='Playback position to start from')
@click.option('--no-store', is_flag=True, help='Do not read or write the local store')
@click.option('--cache-dir', type=click.Path(), help='Cache directory')
@click.pass_context
def play(ctx, title, artist, album, genre, track_id, start_ms, no_store, cache_dir):
    """Print lyric lines in time with a simulated playback clock."""
    logger = ctx.obj['logger']

    def show(index: Optional[int], lines) -> None:
        if index is not None and lines[index].text:
            click.echo(format_line(lines[index]))

    try:
        query = validate_track_query(
            TrackQuery(name=title, artist=artist, album=album, genre=genre, track_id=track_id)
        )
        start_ms = validate_start_position(start_ms)
        clock = MonotonicClock(start_ms=start_ms)
        lyrics_store = None if no_store else LyricsStore(Path(cache_dir) if cache_dir else get_cache_dir())
        session = LyricsSession(build_resolver(), PlaybackScheduler(clock, on_index_change=show), lyrics_store)
        lines = asyncio.run(run_playback(session, clock, query, start_ms))
    except AudioSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("Stopped")
        return

    if not lines:
        click.echo("No lyrics found")
        sys.exit(1)


@cli.command()
@click.argument('title')
@click.argument('artist')
@click.option('--country', default='cn', help='Storefront country code')
@click.pass_context
def identify(ctx, title, artist, country):
    """Look up catalog ids and artwork for a track."""
    logger = ctx.obj['logger']
    try:
        identity = asyncio.run(IdentityLookup().lookup(title, artist, country))
    except AudioSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    if identity is None:
        click.echo("No catalog entry found")
        sys.exit(1)
    click.echo(f"Track: {identity.track_name} ({identity.track_id})")
    click.echo(f"Artist: {identity.artist_name} ({identity.artist_id})")
    click.echo(f"Album: {identity.collection_name}")
    click.echo(f"Artwork: {identity.artwork_url}")


def build_directory() -> ArtistDirectory:
    return ArtistDirectory()


@cli.group()
def similar():
    """Related artists and tracks from Last.fm."""
    pass


@similar.command(name='artists')
@click.argument('artist')
@click.option('--details/--no-details', default=True, help='Also fetch portraits and biographies')
@click.pass_context
def similar_artists(ctx, artist, details):
    """List artists similar to ARTIST."""
    logger = ctx.obj['logger']
    try:
        artists = asyncio.run(build_directory().similar_artists(artist, with_details=details))
    except AudioSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    if not artists:
        click.echo("No similar artists found")
        return
    for a in artists:
        portrait = " [portrait]" if a.image else ""
        click.echo(f"{a.name}{portrait}  {a.url}")
        if a.bio:
            click.echo(f"    {a.bio[:200]}")


@similar.command(name='songs')
@click.argument('title')
@click.argument('artist')
@click.option('--alt-name', 'alt_names', multiple=True, help='Other spelling of the title to try')
@click.pass_context
def similar_songs(ctx, title, artist, alt_names):
    """List tracks similar to TITLE by ARTIST."""
    logger = ctx.obj['logger']
    try:
        songs = asyncio.run(build_directory().similar_songs(title, artist, alt_names))
    except AudioSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    if not songs:
        click.echo("No similar tracks found")
        return
    for i, song in enumerate(songs, start=1):
        click.echo(f"{i:2d}. {song.name} - {song.artist}")


@cli.command(name='artist-info')
@click.argument('artist')
@click.pass_context
def artist_info(ctx, artist):
    """Show the Last.fm biography of ARTIST."""
    logger = ctx.obj['logger']
    try:
        info = asyncio.run(build_directory().artist_info(artist))
    except AudioSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    click.echo(f"Artist: {info.name}")
    if info.mbid:
        click.echo(f"MBID: {info.mbid}")
    click.echo(info.content or info.summary or "No biography available")


@cli.group()
def store():
    """Local lyrics store commands."""
    pass


@store.command()
@click.option('--cache-dir', type=click.Path(), help='Cache directory')
def stats(cache_dir):
    """Show store statistics."""
    cache_path = Path(cache_dir) if cache_dir else get_cache_dir()
    stats = LyricsStore(cache_path).get_stats()
    click.echo(f"Store Directory: {stats['cache_dir']}")
    click.echo(f"Total Size: {stats['total_size_kb']:.1f} KB")
    click.echo(f"Records: {stats['record_count']}")


@store.command()
@click.option('--cache-dir', type=click.Path(), help='Cache directory')
@click.option('--days', type=int, default=STORE_MAX_AGE_DAYS, help='Remove records older than N days')
@click.confirmation_option(prompt='Are you sure you want to cleanup the store?')
def cleanup(cache_dir, days):
    """Remove old stored lyrics."""
    cache_path = Path(cache_dir) if cache_dir else get_cache_dir()
    removed = LyricsStore(cache_path).cleanup_old_files(days)
    click.echo(f"✅ Store cleanup completed ({removed} removed)")


@store.command()
@click.argument('track_id')
@click.option('--cache-dir', type=click.Path(), help='Cache directory')
@click.confirmation_option(prompt='Are you sure you want to clear the lyrics for this track?')
def clear(track_id, cache_dir):
    """Clear stored lyrics for one track."""
    cache_path = Path(cache_dir) if cache_dir else get_cache_dir()
    if LyricsStore(cache_path).delete_lyrics(track_id):
        click.echo(f"✅ Cleared lyrics for track {track_id}")
    else:
        click.echo(f"No stored lyrics for track {track_id}")


if __name__ == '__main__':
    cli()
