"""Playback-position driven lyric index scheduler.

The scheduler follows an external playback clock and keeps track of which
lyric line is active. Instead of polling, it sleeps until the next line is
due, wakes up, publishes the new index, and re-reads the clock so that seeks
made while it slept are picked up on the next pass.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ..config import LOOKAHEAD_MS
from ..utils.logging import get_logger
from .models import LyricLine

logger = get_logger(__name__)

# A position this close before the active line's start is timer noise, not a seek
WAKE_JITTER_MS = 50.0

Clock = Callable[[], Optional[float]]
IndexListener = Callable[[Optional[int], Sequence[LyricLine]], None]
Sleeper = Callable[[float], Awaitable[None]]


class ScheduleStatus(str, Enum):
    IDLE = "idle"
    SEEKING = "seeking"
    TRACKING = "tracking"


@dataclass
class ScheduleState:
    """Mutable state owned by the scheduler loop."""

    sequence: List[LyricLine] = field(default_factory=list)
    current_index: Optional[int] = None
    last_position_ms: float = 0.0
    status: ScheduleStatus = ScheduleStatus.IDLE


class PlaybackScheduler:
    """Keeps ``current_index`` in step with a playback clock.

    Args:
        clock: Returns the playback position in milliseconds, or None when
            nothing is playing
        on_index_change: Called with the new index (or None when cleared)
            and the active sequence
        lookahead_ms: Added to every observed position to hide display latency
        sleep: Coroutine used for the inter-line wait (seconds)
    """

    def __init__(
        self,
        clock: Clock,
        on_index_change: Optional[IndexListener] = None,
        lookahead_ms: float = LOOKAHEAD_MS,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.clock = clock
        self.on_index_change = on_index_change
        self.lookahead_ms = lookahead_ms
        self._sleep = sleep
        self._state = ScheduleState()
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    # ----------------------
    # Read-only views
    # ----------------------
    @property
    def sequence(self) -> List[LyricLine]:
        return self._state.sequence

    @property
    def current_index(self) -> Optional[int]:
        return self._state.current_index

    @property
    def status(self) -> ScheduleStatus:
        return self._state.status

    @property
    def last_position_ms(self) -> float:
        return self._state.last_position_ms

    @property
    def current_line(self) -> Optional[LyricLine]:
        index = self._state.current_index
        if index is None:
            return None
        return self._state.sequence[index]

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ----------------------
    # Control
    # ----------------------
    def load(self, sequence: List[LyricLine]) -> None:
        """Swap in a new sequence; the scheduler goes idle until started."""
        self._cancel()
        self._set_index(None)
        self._state = ScheduleState(sequence=list(sequence))
        logger.debug(f"Loaded {len(sequence)} lyric lines")

    def start(self) -> None:
        """Start following the clock, replacing any running loop."""
        self._cancel()
        if not self._state.sequence:
            logger.debug("Nothing to schedule, staying idle")
            return
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation)
        )

    def stop(self) -> None:
        """Stop following the clock and clear the active line."""
        self._cancel()
        self._halt()

    async def wait(self) -> None:
        """Wait for the current loop to finish on its own."""
        if self._task is not None:
            await asyncio.wait({self._task})

    def _cancel(self) -> None:
        # Bumping the generation first makes any pending wake-up inert
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _halt(self) -> None:
        self._set_index(None)
        self._state.status = ScheduleStatus.IDLE

    def _set_index(self, index: Optional[int]) -> None:
        if index == self._state.current_index:
            return
        self._state.current_index = index
        if self.on_index_change is not None:
            self.on_index_change(index, self._state.sequence)

    # ----------------------
    # Index computation
    # ----------------------
    def _first_index_after(self, position_ms: float) -> Optional[int]:
        for i, line in enumerate(self._state.sequence):
            if line.start_time_ms > position_ms:
                return i
        return None

    def upcoming_index(self, position_ms: float) -> Optional[int]:
        """Index of the next line to activate for a lookahead-corrected position.

        Returns None when every line has already started.
        """
        lines = self._state.sequence
        current = self._state.current_index
        if current is not None and current < len(lines):
            next_index = current + 1
            if next_index >= len(lines):
                # On the last line: only a rewind brings anything back
                if position_ms < lines[current].start_time_ms:
                    self._state.status = ScheduleStatus.SEEKING
                    return self._first_index_after(position_ms)
                return None
            if lines[current].start_time_ms <= position_ms < lines[next_index].start_time_ms:
                return next_index

        # Fresh start, or the position left the current line (seek)
        self._state.status = ScheduleStatus.SEEKING
        return self._first_index_after(position_ms)

    def _resync(self, upcoming: int, position_ms: float) -> None:
        """Point the index at the line before ``upcoming`` after a seek."""
        expected = upcoming - 1 if upcoming > 0 else None
        current = self._state.current_index
        if current is None:
            # Started mid-line: assume the line before the next one is playing
            if expected is not None:
                self._set_index(expected)
            return
        if expected == current:
            return
        early_by = self._state.sequence[current].start_time_ms - position_ms
        if upcoming == current and early_by <= WAKE_JITTER_MS:
            # Woke a hair before the line's start; not a real seek
            return
        self._set_index(expected)

    def tick(self, observed_position_ms: float) -> Optional[Tuple[int, float]]:
        """Run one scheduling step for an observed position.

        Returns ``(upcoming_index, delay_ms)`` for the next line, or None when
        the sequence is exhausted and the scheduler went idle.
        """
        position = observed_position_ms + self.lookahead_ms
        self._state.last_position_ms = position

        upcoming = self.upcoming_index(position)
        if upcoming is None:
            logger.debug("Past the last lyric line, stopping")
            self._halt()
            return None

        if self._state.status is ScheduleStatus.SEEKING:
            self._resync(upcoming, position)

        self._state.status = ScheduleStatus.TRACKING
        delay_ms = self._state.sequence[upcoming].start_time_ms - position
        return upcoming, max(0.0, delay_ms)

    def advance(self, index: int) -> None:
        """Activate a line once its start time has been reached."""
        if index < len(self._state.sequence):
            self._set_index(index)
        else:
            self._set_index(None)

    async def _run(self, generation: int) -> None:
        while generation == self._generation:
            observed = self.clock()
            if observed is None:
                logger.debug("No playback position, stopping")
                self._halt()
                return

            step = self.tick(observed)
            if step is None:
                return
            upcoming, delay_ms = step

            await self._sleep(delay_ms / 1000)
            if generation != self._generation:
                return
            self.advance(upcoming)


class MonotonicClock:
    """Playback clock driven by ``time.monotonic``.

    Reports ``start_ms`` plus the time elapsed since creation, and None once
    paused or past ``duration_ms``.
    """

    def __init__(
        self,
        start_ms: float = 0.0,
        duration_ms: Optional[float] = None,
        now: Callable[[], float] = time.monotonic,
    ):
        self._now = now
        self._origin = now()
        self._start_ms = start_ms
        self.duration_ms = duration_ms
        self.paused = False

    def __call__(self) -> Optional[float]:
        if self.paused:
            return None
        position = self._start_ms + (self._now() - self._origin) * 1000
        if self.duration_ms is not None and position > self.duration_ms:
            return None
        return position

    def seek(self, position_ms: float) -> None:
        self._origin = self._now()
        self._start_ms = position_ms

    def pause(self) -> None:
        self.paused = True
