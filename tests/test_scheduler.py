"""Tests for the playback index scheduler."""

import asyncio

import pytest

from audiosync.core.models import LyricLine
from audiosync.core.scheduler import MonotonicClock, PlaybackScheduler, ScheduleStatus


def _lines(*starts):
    return [LyricLine(float(s), f"line {i}") for i, s in enumerate(starts)]


class Recorder:
    def __init__(self):
        self.indices = []

    def __call__(self, index, sequence):
        self.indices.append(index)


class TestLoop:
    """Driving the full loop with a clock that sleeping advances."""

    def _run(self, scheduler):
        async def run():
            scheduler.start()
            await scheduler.wait()

        asyncio.run(run())

    def test_notifies_each_line_in_order(self, manual_clock, three_lines):
        recorder = Recorder()
        scheduler = PlaybackScheduler(manual_clock, recorder, lookahead_ms=0, sleep=manual_clock.sleep)
        scheduler.load(three_lines)

        self._run(scheduler)

        assert recorder.indices == [0, 1, 2, None]
        assert manual_clock.sleeps == pytest.approx([1.0, 1.0])
        assert scheduler.status is ScheduleStatus.IDLE

    def test_lookahead_shortens_first_wait(self, manual_clock, three_lines):
        recorder = Recorder()
        scheduler = PlaybackScheduler(manual_clock, recorder, lookahead_ms=400, sleep=manual_clock.sleep)
        scheduler.load(three_lines)

        self._run(scheduler)

        assert recorder.indices == [0, 1, 2, None]
        assert manual_clock.sleeps == pytest.approx([0.6, 1.0])

    def test_missing_clock_stops_cleanly(self, manual_clock, three_lines):
        manual_clock.position_ms = None
        recorder = Recorder()
        scheduler = PlaybackScheduler(manual_clock, recorder, sleep=manual_clock.sleep)
        scheduler.load(three_lines)

        self._run(scheduler)

        assert recorder.indices == []
        assert scheduler.current_index is None
        assert not scheduler.is_running

    def test_empty_sequence_stays_idle(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock, sleep=manual_clock.sleep)
        scheduler.load([])

        async def run():
            scheduler.start()
            return scheduler.is_running

        assert asyncio.run(run()) is False
        assert scheduler.status is ScheduleStatus.IDLE

    def test_stop_cancels_pending_wakeup(self, manual_clock):
        recorder = Recorder()
        scheduler = PlaybackScheduler(manual_clock, recorder)
        scheduler.load(_lines(0, 100000))

        async def run():
            scheduler.start()
            await asyncio.sleep(0)
            assert scheduler.current_index == 0
            scheduler.stop()
            await asyncio.sleep(0)
            return scheduler.is_running

        assert asyncio.run(run()) is False
        assert recorder.indices == [0, None]

    def test_load_replaces_running_sequence(self, manual_clock):
        recorder = Recorder()
        scheduler = PlaybackScheduler(manual_clock, recorder)

        async def run():
            scheduler.load(_lines(0, 100000))
            scheduler.start()
            await asyncio.sleep(0)
            scheduler.load(_lines(50000, 60000))
            await asyncio.sleep(0)
            return scheduler.is_running

        assert asyncio.run(run()) is False
        assert recorder.indices == [0, None]
        assert scheduler.sequence[0].start_time_ms == 50000


class TestTick:
    """Single scheduling steps, no event loop involved."""

    def test_fresh_start_mid_line(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock, lookahead_ms=0)
        scheduler.load(_lines(0, 1000, 2000))

        upcoming, delay = scheduler.tick(1500)

        assert scheduler.current_index == 1
        assert upcoming == 2
        assert delay == pytest.approx(500)
        assert scheduler.status is ScheduleStatus.TRACKING

    def test_before_first_line(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock, lookahead_ms=0)
        scheduler.load(_lines(1000, 2000))

        upcoming, delay = scheduler.tick(200)

        assert scheduler.current_index is None
        assert (upcoming, delay) == (0, pytest.approx(800))

    def test_scrub_forward_then_back(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock, lookahead_ms=400)
        lines = _lines(0, 1000, 2000, 3000, 4000)
        scheduler.load(lines)

        upcoming, _ = scheduler.tick(2700)
        assert scheduler.current_index == 3
        assert upcoming == 4

        upcoming, delay = scheduler.tick(200)
        assert scheduler.current_index == 0
        assert upcoming == 1
        assert delay == pytest.approx(400)
        assert lines[scheduler.current_index].start_time_ms <= 200 + 400

    def test_rewind_from_last_line(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock, lookahead_ms=0)
        scheduler.load(_lines(0, 1000, 2000))
        scheduler.advance(2)

        upcoming, _ = scheduler.tick(500)

        assert scheduler.current_index == 0
        assert upcoming == 1

    def test_past_last_line_goes_idle(self, manual_clock):
        recorder = Recorder()
        scheduler = PlaybackScheduler(manual_clock, recorder, lookahead_ms=0)
        scheduler.load(_lines(0, 1000))
        scheduler.advance(1)

        assert scheduler.tick(5000) is None
        assert scheduler.current_index is None
        assert recorder.indices == [1, None]

    def test_early_wakeup_is_not_a_seek(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock, lookahead_ms=0)
        scheduler.load(_lines(0, 1000, 2000, 3000))
        scheduler.advance(2)

        upcoming, delay = scheduler.tick(1970)

        assert scheduler.current_index == 2
        assert upcoming == 2
        assert delay == pytest.approx(30)

    def test_advance_out_of_range_clears(self, manual_clock):
        scheduler = PlaybackScheduler(manual_clock)
        scheduler.load(_lines(0))
        scheduler.advance(0)
        scheduler.advance(5)
        assert scheduler.current_index is None


class TestMonotonicClock:
    def test_reports_elapsed_time(self):
        now = [10.0]
        clock = MonotonicClock(start_ms=500, now=lambda: now[0])
        now[0] = 11.5
        assert clock() == pytest.approx(2000)

    def test_seek_pause_and_duration(self):
        now = [0.0]
        clock = MonotonicClock(duration_ms=1000, now=lambda: now[0])
        clock.seek(900)
        now[0] = 0.05
        assert clock() == pytest.approx(950)
        now[0] = 0.5
        assert clock() is None

        clock.seek(0)
        clock.pause()
        assert clock() is None
