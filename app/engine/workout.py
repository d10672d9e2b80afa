"""
Workout engine.

One :class:`WorkoutEngine` per user: the state machine, the recovery
layer, the selected-routine cache and the snapshot bus wired together
behind the operations the UI calls.  Engines are built explicitly and
kept in an :class:`~app.engine.registry.EngineRegistry`; there is no
global active-session state.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Mapping, Optional, Union

from app.core.errors import InvalidRoutineError, NotFoundError, WorkoutError
from app.engine.cache import SelectedRoutineCache
from app.engine.clock import Clock
from app.engine.config import EngineConfig
from app.engine.events import SnapshotBus, Subscriber
from app.engine.ledger import is_personal_record, last_and_best, summarize_session
from app.engine.recovery import RecoveryResult, RecoveryService
from app.engine.state_machine import SessionStateMachine
from app.engine.store import RemoteStore
from app.schemas.engine import EngineSnapshot, SessionSummary
from app.schemas.exercise_set import (ExerciseLedgerView, ExercisePerformance, ExerciseSetRead, SetCreate,
                                      SetUpdate, )
from app.schemas.workout_session import WorkoutSessionRead

logger = logging.getLogger(__name__)

# How far back personal bests are looked up
PERFORMANCE_HISTORY_LIMIT = 500


class WorkoutEngine:
    """Everything one user can do with their workout."""

    def __init__(self, user_id: int, store: RemoteStore, cache: SelectedRoutineCache, clock: Clock,
                 config: Optional[EngineConfig] = None, ):
        self.store = store
        self.cache = cache
        self.config = config or EngineConfig()
        self.bus = SnapshotBus()
        self.machine = SessionStateMachine(user_id, store, clock, self.config, bus=self.bus)
        self.recovery = RecoveryService(self.machine, cache)
        self.last_recovery: Optional[RecoveryResult] = None
        self.recent_sessions: list[WorkoutSessionRead] = []

    @property
    def user_id(self) -> int:
        return self.machine.user_id

    @property
    def session(self) -> Optional[WorkoutSessionRead]:
        return self.machine.session

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> RecoveryResult:
        """Reconcile with the store.  Never raises."""
        result = await self.recovery.recover()
        self.last_recovery = result
        if result.repaired_session_ids or result.cancelled_session_ids:
            await self._refresh_history()
        return result

    async def switch_user(self, user_id: int) -> RecoveryResult:
        self.machine.switch_user(user_id)
        self.recent_sessions = []
        return await self.load()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.bus.subscribe(callback)

    def snapshot(self) -> EngineSnapshot:
        return self.machine.snapshot()

    def close(self) -> None:
        self.machine.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, routine_id: int, name: Optional[str] = None, notes: Optional[str] = None,
                    location: Optional[str] = None, ) -> EngineSnapshot:
        async with self._refresh_after_repairs():
            await self.machine.start(routine_id, name=name, notes=notes, location=location)
        self.cache.clear(self.user_id)
        return self.snapshot()

    async def pause(self) -> EngineSnapshot:
        async with self._refresh_after_repairs():
            await self.machine.pause()
        return self.snapshot()

    async def resume(self) -> EngineSnapshot:
        async with self._refresh_after_repairs():
            await self.machine.resume()
        return self.snapshot()

    async def complete(self, duration_seconds: Optional[float] = None) -> WorkoutSessionRead:
        session = await self.machine.complete(duration_seconds)
        await self._refresh_history()
        return session

    async def cancel(self) -> WorkoutSessionRead:
        session = await self.machine.cancel()
        await self._refresh_history()
        return session

    async def _refresh_history(self) -> None:
        # The transition already happened; a stale list is not worth failing it
        try:
            self.recent_sessions = await self.history()
        except WorkoutError:
            logger.warning("Could not refresh history for user %s", self.user_id, exc_info=True)

    @asynccontextmanager
    async def _refresh_after_repairs(self) -> AsyncIterator[None]:
        """Re-fetch history if an orphan was completed, even when the call fails."""
        repaired = self.machine.orphans_repaired
        try:
            yield
        finally:
            if self.machine.orphans_repaired != repaired:
                await self._refresh_history()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def select_exercise(self, exercise_id: str) -> EngineSnapshot:
        return self.machine.select_exercise(exercise_id)

    def finish_exercise(self) -> int:
        return self.machine.finish_exercise()

    def select_rest_preset(self, seconds: int) -> EngineSnapshot:
        return self.machine.select_rest_preset(seconds)

    def start_rest(self, preset_seconds: Optional[int] = None,
                   duration_seconds: Optional[int] = None) -> EngineSnapshot:
        return self.machine.start_rest(preset_seconds, duration_seconds)

    def skip_rest(self) -> bool:
        return self.machine.skip_rest()

    def reset_rest(self) -> EngineSnapshot:
        return self.machine.reset_rest()

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    async def record_set(self, exercise_id: str, data: Union[SetCreate, Mapping[str, Any]]) -> ExerciseSetRead:
        return await self.machine.record_set(exercise_id, data)

    async def update_set(self, set_id: int, data: Union[SetUpdate, Mapping[str, Any]]) -> ExerciseSetRead:
        return await self.machine.update_set(set_id, data)

    async def delete_set(self, set_id: int) -> ExerciseSetRead:
        return await self.machine.delete_set(set_id)

    def exercise_view(self, exercise_id: str) -> ExerciseLedgerView:
        return self.machine.ledger.view(exercise_id)

    def current_exercise_view(self) -> Optional[ExerciseLedgerView]:
        exercise_id = self.machine.exercise_timer.exercise_id
        return self.exercise_view(exercise_id) if exercise_id else None

    # ------------------------------------------------------------------
    # History and performance
    # ------------------------------------------------------------------

    async def history(self, limit: Optional[int] = None) -> list[WorkoutSessionRead]:
        limit = limit or self.config.history_limit
        return await self.machine.call("fetch_history", self.store.fetch_history(self.user_id, limit))

    async def _owned_session(self, session_id: int) -> WorkoutSessionRead:
        session = await self.machine.call("get_session", self.store.get_session(session_id))
        if session.user_id != self.user_id:
            raise NotFoundError(f"Workout session {session_id} not found")
        return session

    async def session_summary(self, session_id: int) -> SessionSummary:
        current = self.session
        if current is not None and current.id == session_id:
            return summarize_session(current, self.machine.ledger.sets, self.machine.elapsed_seconds())
        session = await self._owned_session(session_id)
        sets = await self.machine.call("fetch_sets", self.store.fetch_sets(session_id))
        return summarize_session(session, sets)

    async def exercise_performance(self, exercise_id: str) -> ExercisePerformance:
        history = await self.machine.call("fetch_exercise_history", self.store.fetch_exercise_history(
            self.user_id, exercise_id, PERFORMANCE_HISTORY_LIMIT))
        return last_and_best(exercise_id, history)

    async def is_personal_record(self, exercise_id: str, weight_kg: float, reps_completed: int) -> bool:
        performance = await self.exercise_performance(exercise_id)
        return is_personal_record(weight_kg, reps_completed, performance.best)

    # ------------------------------------------------------------------
    # Selected routine
    # ------------------------------------------------------------------

    def selected_routine(self) -> Optional[int]:
        return self.cache.get(self.user_id)

    async def select_routine(self, routine_id: int) -> int:
        routine = await self.machine.resolve_routine(routine_id)
        if routine is None:
            raise NotFoundError(f"Routine {routine_id} not found")
        if routine.exercise_count == 0:
            raise InvalidRoutineError(f"Routine '{routine.name}' has no exercises")
        self.cache.set(self.user_id, routine_id)
        return routine_id

    def clear_selected_routine(self) -> None:
        self.cache.clear(self.user_id)
