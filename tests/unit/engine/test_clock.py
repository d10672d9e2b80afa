"""Tests for the clock abstraction and the ticker."""

import asyncio
import datetime

import pytest

from app.engine.clock import ManualClock, SystemClock, Ticker


async def _settle():
    """Let woken tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)


# ======================================================================
# ManualClock
# ======================================================================


class TestManualClock:
    def test_starts_at_given_time(self):
        start = datetime.datetime(2024, 5, 1, 7, 30)
        clock = ManualClock(start)
        assert clock.now() == start
        assert clock.monotonic() == 0.0

    def test_advance_moves_both_clocks(self):
        clock = ManualClock()
        before = clock.now()
        clock.advance(90)
        assert clock.now() - before == datetime.timedelta(seconds=90)
        assert clock.monotonic() == 90.0

    def test_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1)

    @pytest.mark.asyncio
    async def test_sleep_wakes_on_advance(self):
        clock = ManualClock()
        task = asyncio.create_task(clock.sleep(10))
        await _settle()
        assert clock.pending_sleepers == 1

        clock.advance(5)
        await _settle()
        assert not task.done()

        clock.advance(5)
        await _settle()
        assert task.done()
        assert clock.pending_sleepers == 0


class TestSystemClock:
    def test_now_is_naive_utc(self):
        now = SystemClock().now()
        assert now.tzinfo is None
        reference = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
        assert abs((reference - now).total_seconds()) < 5

    def test_monotonic_does_not_go_backwards(self):
        clock = SystemClock()
        assert clock.monotonic() <= clock.monotonic()


# ======================================================================
# Ticker
# ======================================================================


class TestTicker:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            Ticker(ManualClock(), 0, lambda: None)

    @pytest.mark.asyncio
    async def test_ticks_once_per_interval(self):
        clock = ManualClock()
        ticks = []
        ticker = Ticker(clock, 1.0, lambda: ticks.append(clock.monotonic()))
        ticker.start()
        await _settle()

        for _ in range(3):
            clock.advance(1)
            await _settle()

        assert ticks == [1.0, 2.0, 3.0]
        ticker.stop()

    @pytest.mark.asyncio
    async def test_stop_prevents_further_ticks(self):
        clock = ManualClock()
        ticks = []
        ticker = Ticker(clock, 1.0, lambda: ticks.append(1))
        ticker.start()
        await _settle()
        ticker.stop()
        assert not ticker.running

        clock.advance(5)
        await _settle()
        assert ticks == []

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_ticking(self):
        clock = ManualClock()
        calls = []

        def callback():
            calls.append(1)
            raise RuntimeError("boom")

        ticker = Ticker(clock, 1.0, callback)
        ticker.start()
        await _settle()
        clock.advance(1)
        await _settle()
        clock.advance(1)
        await _settle()

        assert len(calls) == 2
        assert ticker.running
        ticker.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        clock = ManualClock()
        ticker = Ticker(clock, 1.0, lambda: None)
        ticker.start()
        ticker.start()
        await _settle()
        assert clock.pending_sleepers == 1
        ticker.stop()
