"""
Session, exercise and rest timers.

None of the timers counts ticks.  Session elapsed time is derived from
persisted timestamps::

    elapsed = (now - started_at) - paused_seconds - (now - paused_at if paused)

and the exercise and rest timers are stopwatches over the clock's
monotonic time.  A tick only tells consumers to re-read the values.
"""

from __future__ import annotations

import datetime
import math
from typing import Optional, Sequence

from app.engine.clock import Clock
from app.schemas.timers import ExerciseTimerView, RestTimerState, RestTimerView


# ======================================================================
# Session elapsed time
# ======================================================================


def closed_paused_seconds(paused_seconds: float, paused_at: Optional[datetime.datetime],
                          now: datetime.datetime, ) -> float:
    """Total paused time as of ``now``, closing an open pause interval."""
    if paused_at is None:
        return paused_seconds
    return paused_seconds + max(0.0, (now - paused_at).total_seconds())


def compute_elapsed_seconds(started_at: datetime.datetime, paused_seconds: float,
                            paused_at: Optional[datetime.datetime], now: datetime.datetime, ) -> float:
    """Active (non-paused) time since ``started_at``.  Never negative."""
    total = (now - started_at).total_seconds()
    return max(0.0, total - closed_paused_seconds(paused_seconds, paused_at, now))


def format_duration(seconds: float) -> str:
    """``m:ss`` below one hour, ``h:mm:ss`` above."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


# ======================================================================
# Stopwatch
# ======================================================================


class Stopwatch:
    """Accumulates running time over the clock's monotonic time."""

    def __init__(self, clock: Clock):
        self._clock = clock
        self._accumulated = 0.0
        self._running_since: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._running_since is not None

    def start(self) -> None:
        if self._running_since is None:
            self._running_since = self._clock.monotonic()

    def stop(self) -> None:
        if self._running_since is not None:
            self._accumulated += self._clock.monotonic() - self._running_since
            self._running_since = None

    def reset(self) -> None:
        self._accumulated = 0.0
        self._running_since = None

    def elapsed(self) -> float:
        if self._running_since is None:
            return self._accumulated
        return self._accumulated + (self._clock.monotonic() - self._running_since)


# ======================================================================
# Exercise timer
# ======================================================================


class ExerciseTimer:
    """Elapsed time on the currently selected exercise.

    Runs only while the session is active and an exercise is selected.
    Finishing the exercise adds its time into ``time_exercising_seconds``
    (time under work, as opposed to total workout time which includes
    rest) and resets the counter.
    """

    def __init__(self, clock: Clock):
        self._watch = Stopwatch(clock)
        self._enabled = False
        self._time_exercising = 0.0
        self.exercise_id: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._watch.running

    @property
    def elapsed_seconds(self) -> int:
        return int(self._watch.elapsed())

    @property
    def time_exercising_seconds(self) -> int:
        return int(self._time_exercising)

    def run(self) -> None:
        """Session became active."""
        self._enabled = True
        if self.exercise_id is not None:
            self._watch.start()

    def suspend(self) -> None:
        """Session paused (or ended)."""
        self._enabled = False
        self._watch.stop()

    def select(self, exercise_id: str) -> None:
        """Make ``exercise_id`` current, finishing any other exercise first."""
        if self.exercise_id == exercise_id:
            return
        if self.exercise_id is not None:
            self.finish()
        self.exercise_id = exercise_id
        self._watch.reset()
        if self._enabled:
            self._watch.start()

    def finish(self) -> int:
        """Finish the current exercise.  Returns the seconds spent on it."""
        spent = self._watch.elapsed()
        self._time_exercising += spent
        self._watch.reset()
        self.exercise_id = None
        return int(spent)

    def reset(self) -> None:
        """Forget everything (new or reloaded session)."""
        self._watch.reset()
        self._time_exercising = 0.0
        self.exercise_id = None

    def view(self) -> ExerciseTimerView:
        return ExerciseTimerView(exercise_id=self.exercise_id, elapsed_seconds=self.elapsed_seconds,
                                 is_running=self.running, time_exercising_seconds=self.time_exercising_seconds, )


# ======================================================================
# Rest timer
# ======================================================================


class RestTimer:
    """Countdown between sets.

    ``idle -> running -> (elapsed | skipped) -> idle``.  Starting again
    from any state restarts the countdown.  While suspended (session
    paused) the remaining time is frozen.
    """

    def __init__(self, clock: Clock, presets: Sequence[int], default_seconds: int, max_seconds: int):
        if default_seconds not in presets:
            raise ValueError(f"Default rest {default_seconds}s is not one of the presets {list(presets)}")
        self._watch = Stopwatch(clock)
        self.presets = tuple(presets)
        self.max_seconds = max_seconds
        self.preset_seconds = default_seconds
        self.state = RestTimerState.IDLE
        self.duration_seconds = 0
        self._suspended = False

    @property
    def suspended(self) -> bool:
        return self._suspended

    @property
    def remaining_seconds(self) -> int:
        if self.state is not RestTimerState.RUNNING:
            return 0
        return max(0, math.ceil(self.duration_seconds - self._watch.elapsed()))

    def select_preset(self, seconds: int) -> None:
        if seconds not in self.presets:
            raise ValueError(f"{seconds}s is not a rest preset; choose one of {list(self.presets)}")
        self.preset_seconds = seconds

    def start(self, duration_seconds: Optional[int] = None) -> None:
        """Start (or restart) the countdown; defaults to the selected preset."""
        duration = self.preset_seconds if duration_seconds is None else duration_seconds
        if duration <= 0 or duration > self.max_seconds:
            raise ValueError(f"Rest duration must be between 1 and {self.max_seconds} seconds")
        self.duration_seconds = int(duration)
        self.state = RestTimerState.RUNNING
        self._watch.reset()
        if not self._suspended:
            self._watch.start()

    def skip(self) -> bool:
        """End the rest early.  Returns ``False`` if nothing was running."""
        if self.poll() or self.state is not RestTimerState.RUNNING:
            return False
        self._watch.stop()
        self.state = RestTimerState.SKIPPED
        return True

    def poll(self) -> bool:
        """Detect the countdown reaching zero.  Returns ``True`` on that transition."""
        if self.state is RestTimerState.RUNNING and self._watch.elapsed() >= self.duration_seconds:
            self._watch.stop()
            self.state = RestTimerState.ELAPSED
            return True
        return False

    def reset(self) -> None:
        """Back to ``idle`` (after an elapsed or skipped rest, or on session end)."""
        self._watch.reset()
        self.state = RestTimerState.IDLE
        self.duration_seconds = 0

    def suspend(self) -> None:
        self._suspended = True
        self._watch.stop()

    def resume(self) -> None:
        self._suspended = False
        if self.state is RestTimerState.RUNNING:
            self._watch.start()

    def taken_seconds(self) -> Optional[int]:
        """Rest actually taken in the current/last countdown, ``None`` when idle."""
        if self.state is RestTimerState.IDLE:
            return None
        return int(min(self._watch.elapsed(), self.duration_seconds))

    def view(self) -> RestTimerView:
        self.poll()
        return RestTimerView(state=self.state, duration_seconds=self.duration_seconds,
                             remaining_seconds=self.remaining_seconds, is_suspended=self._suspended,
                             preset_seconds=self.preset_seconds, )
