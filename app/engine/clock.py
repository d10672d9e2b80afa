"""
Clock abstraction shared by every timer.

``now()`` is UTC wall time (what gets persisted, and what elapsed session
time is derived from so it stays correct across reloads and process
suspension).  ``monotonic()`` drives the in-process exercise and rest
timers.  ``sleep()`` is what the :class:`Ticker` waits on, so a
:class:`ManualClock` makes the whole engine deterministic in tests.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from app.core.dates import utcnow

logger = logging.getLogger(__name__)


class Clock(ABC):
    """Time source used by the engine."""

    @abstractmethod
    def now(self) -> datetime.datetime:
        """Current UTC time (naive)."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Monotonic seconds, only meaningful as differences."""
        ...

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        ...


class SystemClock(Clock):
    """The real clock."""

    def now(self) -> datetime.datetime:
        return utcnow()

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualClock(Clock):
    """A clock that only moves when :meth:`advance` is called.

    Pending :meth:`sleep` calls whose deadline has been reached are woken
    by ``advance``; the sleeping tasks run on the next loop iteration.
    """

    def __init__(self, start: Optional[datetime.datetime] = None):
        self._now = start or datetime.datetime(2024, 1, 1, 8, 0, 0)
        self._monotonic = 0.0
        self._sleepers: list[tuple[float, asyncio.Future]] = []

    def now(self) -> datetime.datetime:
        return self._now

    def monotonic(self) -> float:
        return self._monotonic

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        entry = (self._monotonic + seconds, future)
        self._sleepers.append(entry)
        try:
            await future
        finally:
            if entry in self._sleepers:
                self._sleepers.remove(entry)

    def advance(self, seconds: float) -> None:
        """Move both clocks forward by ``seconds``."""
        if seconds < 0:
            raise ValueError("A clock cannot go backwards")
        self._now += datetime.timedelta(seconds=seconds)
        self._monotonic += seconds
        for entry in list(self._sleepers):
            deadline, future = entry
            if deadline <= self._monotonic:
                self._sleepers.remove(entry)
                if not future.done():
                    future.set_result(None)

    @property
    def pending_sleepers(self) -> int:
        return len(self._sleepers)


class Ticker:
    """Invokes ``callback`` once per ``interval`` while running.

    Ticks are notifications only: timer values are always recomputed from
    the clock, so a missed or late tick never causes drift.
    """

    def __init__(self, clock: Clock, interval: float, callback: Callable[[], None]):
        if interval <= 0:
            raise ValueError("Tick interval must be positive")
        self._clock = clock
        self._interval = interval
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking.  Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Stop ticking.  Takes effect immediately: no further callback runs."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await self._clock.sleep(self._interval)
            try:
                self._callback()
            except Exception:
                logger.exception("Tick callback failed")
