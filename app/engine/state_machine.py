"""
Session state machine.

Owns the lifecycle of the user's single live workout::

    NONE -> ACTIVE <-> PAUSED -> (COMPLETED | CANCELLED) -> NONE

and drives the exercise timer, the rest timer, the ticker and the set
ledger from it.

Rules
-----

* A transition is committed locally only after the store accepted it.
  If the remote call fails the active session, the timers and the ledger
  are exactly as they were, and the call can simply be retried.
* The active session is an immutable :class:`WorkoutSessionRead`,
  replaced in one assignment.  Timers are switched and the snapshot is
  published in the same synchronous step, with no ``await`` in between.
* Only one mutating operation may be in flight.  A second one is
  rejected with :class:`SessionBusyError`.
* A live record whose routine reference is missing is an *orphan*.  It
  is completed with a duration of zero before anything is exposed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Mapping, Optional, TypeVar, Union

from app.core.errors import (ActiveSessionExistsError, InvalidRoutineError, InvalidTransitionError, NotFoundError,
                             OrphanSessionError, SessionBusyError, )
from app.engine.clock import Clock, Ticker
from app.engine.config import EngineConfig
from app.engine.events import SnapshotBus
from app.engine.ledger import SetLedger, validate_set_data, validate_set_update
from app.engine.store import RemoteStore, call_store
from app.engine.timers import (ExerciseTimer, RestTimer, closed_paused_seconds, compute_elapsed_seconds,
                               format_duration, )
from app.models.workout_session import SessionStatus
from app.schemas.engine import EngineSnapshot, EngineStatus
from app.schemas.exercise_set import ExerciseSetRead, SetCreate, SetRecord, SetUpdate
from app.schemas.routine import RoutineRead
from app.schemas.workout_session import (WorkoutSessionCreate, WorkoutSessionRead, WorkoutSessionUpdate, )

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionStateMachine:
    """Lifecycle, timers and ledger of one user's live workout."""

    def __init__(self, user_id: int, store: RemoteStore, clock: Clock, config: EngineConfig,
                 bus: Optional[SnapshotBus] = None, ):
        self.user_id = user_id
        self.store = store
        self.clock = clock
        self.config = config
        self.bus = bus or SnapshotBus()
        self.ledger = SetLedger()
        self.exercise_timer = ExerciseTimer(clock)
        self.rest_timer = RestTimer(clock, config.rest_presets, config.default_rest_seconds, config.max_rest_seconds)
        self._ticker = Ticker(clock, config.tick_seconds, self._on_tick)
        self._session: Optional[WorkoutSessionRead] = None
        self._busy = False
        # Bumped on every orphan repair so callers know history went stale
        self.orphans_repaired = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def session(self) -> Optional[WorkoutSessionRead]:
        return self._session

    @property
    def status(self) -> EngineStatus:
        if self._session is None:
            return EngineStatus.NONE
        if self._session.status == SessionStatus.PAUSED:
            return EngineStatus.PAUSED
        return EngineStatus.ACTIVE

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    def elapsed_seconds(self) -> int:
        if self._session is None:
            return 0
        return int(compute_elapsed_seconds(self._session.started_at, self._session.paused_seconds,
                                           self._session.paused_at, self.clock.now()))

    def snapshot(self, event: str = "snapshot") -> EngineSnapshot:
        elapsed = self.elapsed_seconds()
        status = self.status
        return EngineSnapshot(event=event, status=status, session=self._session,
                              is_active=status == EngineStatus.ACTIVE, is_paused=status == EngineStatus.PAUSED,
                              elapsed_seconds=elapsed, elapsed_formatted=format_duration(elapsed),
                              exercise_timer=self.exercise_timer.view(), rest_timer=self.rest_timer.view(), )

    def publish(self, event: str) -> EngineSnapshot:
        snapshot = self.snapshot(event)
        self.bus.publish(snapshot)
        return snapshot

    def _on_tick(self) -> None:
        self.publish("rest_elapsed" if self.rest_timer.poll() else "tick")

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def mutation(self) -> AsyncIterator[None]:
        """Serialize mutating operations by rejecting overlapping calls."""
        if self._busy:
            raise SessionBusyError("Another workout operation is still in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    async def call(self, operation: str, awaitable: Awaitable[T]) -> T:
        return await call_store(operation, awaitable, self.config.remote_timeout_seconds)

    def _require_live(self) -> WorkoutSessionRead:
        if self._session is None:
            raise InvalidTransitionError("There is no workout in progress")
        return self._session

    def _require_active(self, action: str) -> WorkoutSessionRead:
        session = self._require_live()
        if session.status != SessionStatus.ACTIVE:
            raise InvalidTransitionError(f"Cannot {action} while the workout is paused")
        return session

    def _apply_timers(self) -> None:
        """Align timers and ticker with the current status."""
        status = self.status
        if status == EngineStatus.ACTIVE:
            self.exercise_timer.run()
            self.rest_timer.resume()
            self._ticker.start()
        elif status == EngineStatus.PAUSED:
            self.exercise_timer.suspend()
            self.rest_timer.suspend()
            self._ticker.stop()
        else:
            self._ticker.stop()
            self.exercise_timer.suspend()
            self.exercise_timer.reset()
            self.rest_timer.reset()
            self.rest_timer.resume()

    def _enter(self, session: WorkoutSessionRead, sets: list[ExerciseSetRead], event: str) -> EngineSnapshot:
        """Make ``session`` the active one, with fresh timers."""
        self.ledger.load(sets)
        self.exercise_timer.reset()
        self.rest_timer.reset()
        self._session = session
        self._apply_timers()
        return self.publish(event)

    def _accept(self, session: WorkoutSessionRead, event: str) -> EngineSnapshot:
        self._session = session
        self._apply_timers()
        return self.publish(event)

    def _leave(self, event: str) -> EngineSnapshot:
        self._session = None
        self.ledger.clear()
        self._apply_timers()
        return self.publish(event)

    def reset_local(self) -> None:
        """Forget the local session without touching the store."""
        self._session = None
        self.ledger.clear()
        self._apply_timers()

    def switch_user(self, user_id: int) -> None:
        if self._busy:
            raise SessionBusyError("Cannot switch user while a workout operation is in progress")
        self.reset_local()
        self.user_id = user_id
        self.publish("user_switched")

    def close(self) -> None:
        self._ticker.stop()
        self.bus.clear()

    # ------------------------------------------------------------------
    # Orphans
    # ------------------------------------------------------------------

    async def resolve_routine(self, routine_id: int) -> Optional[RoutineRead]:
        """The routine if it exists and belongs to this user."""
        routine = await self.call("get_routine", self.store.get_routine(routine_id))
        if routine is None or routine.user_id != self.user_id:
            return None
        return routine

    async def is_orphan(self, session: WorkoutSessionRead) -> bool:
        """A live session whose routine reference is missing or dangling."""
        if not session.is_live:
            return False
        if session.routine_id is None:
            return True
        return await self.resolve_routine(session.routine_id) is None

    async def repair_orphan(self, session: WorkoutSessionRead) -> WorkoutSessionRead:
        """Complete an orphaned session with a duration of zero."""
        logger.warning("%s; completing it with zero duration", OrphanSessionError(session.id))
        now = self.clock.now()
        update = WorkoutSessionUpdate(status=SessionStatus.COMPLETED, completed_at=now, paused_at=None,
                                      paused_seconds=closed_paused_seconds(session.paused_seconds,
                                                                           session.paused_at, now),
                                      total_duration_seconds=0, )
        repaired = await self.call("update_session", self.store.update_session(session.id, update))
        self.orphans_repaired += 1
        return repaired

    async def cancel_stale(self, session: WorkoutSessionRead) -> WorkoutSessionRead:
        """Cancel a surplus live session, keeping its elapsed time for audit."""
        logger.warning("User %s has more than one live session; cancelling session %s", self.user_id, session.id)
        return await self.call("update_session", self.store.update_session(session.id, self._ending(
            session, SessionStatus.CANCELLED)))

    async def adopt(self, session: WorkoutSessionRead) -> Optional[WorkoutSessionRead]:
        """Take over a live record fetched from the store.

        Orphans are repaired instead and ``None`` is returned.  The
        caller holds the mutation guard.
        """
        if await self.is_orphan(session):
            await self.repair_orphan(session)
            self.reset_local()
            return None
        return await self._take_over(session)

    async def _take_over(self, session: WorkoutSessionRead) -> WorkoutSessionRead:
        sets = await self.call("fetch_sets", self.store.fetch_sets(session.id))
        self._enter(session, sets, "recovered")
        logger.info("Recovered %s session %s for user %s", session.status.value, session.id, self.user_id)
        return session

    async def _settle(self, updated: WorkoutSessionRead, event: str) -> Optional[WorkoutSessionRead]:
        """Accept an updated live record, unless it came back orphaned."""
        if updated.is_live and updated.routine_id is None:
            await self.repair_orphan(updated)
            self._leave("orphan_repaired")
            return None
        self._accept(updated, event)
        return updated

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self, routine_id: int, name: Optional[str] = None, notes: Optional[str] = None,
                    location: Optional[str] = None, ) -> WorkoutSessionRead:
        async with self.mutation():
            if self._session is not None:
                raise ActiveSessionExistsError(f"Session {self._session.id} is already in progress")

            # The store is authoritative: another client, or a write that timed
            # out here but still committed, may have left a live session behind
            for live in await self.call("fetch_live_sessions", self.store.fetch_live_sessions(self.user_id)):
                if await self.is_orphan(live):
                    await self.repair_orphan(live)
                elif self._session is None:
                    await self._take_over(live)
            if self._session is not None:
                raise ActiveSessionExistsError(
                    f"Session {self._session.id} is already {self._session.status.value}")

            routine = await self.resolve_routine(routine_id)
            if routine is None:
                raise NotFoundError(f"Routine {routine_id} not found")
            if routine.exercise_count == 0:
                raise InvalidRoutineError(f"Routine '{routine.name}' has no exercises")

            now = self.clock.now()
            data = WorkoutSessionCreate(user_id=self.user_id, routine_id=routine.id,
                                        name=name or f"{routine.name} - {now:%Y-%m-%d}", started_at=now,
                                        notes=notes, location=location, )
            session = await self.call("create_session", self.store.create_session(data))
            self._enter(session, [], "started")
            logger.info("User %s started session %s (%s)", self.user_id, session.id, session.name)
            return session

    async def pause(self) -> Optional[WorkoutSessionRead]:
        async with self.mutation():
            session = self._require_live()
            if session.status == SessionStatus.PAUSED:
                return session
            update = WorkoutSessionUpdate(status=SessionStatus.PAUSED, paused_at=self.clock.now())
            updated = await self.call("update_session", self.store.update_session(session.id, update))
            logger.info("Session %s paused", session.id)
            return await self._settle(updated, "paused")

    async def resume(self) -> Optional[WorkoutSessionRead]:
        async with self.mutation():
            session = self._require_live()
            if session.status == SessionStatus.ACTIVE:
                return session
            paused_seconds = closed_paused_seconds(session.paused_seconds, session.paused_at, self.clock.now())
            update = WorkoutSessionUpdate(status=SessionStatus.ACTIVE, paused_at=None, paused_seconds=paused_seconds)
            updated = await self.call("update_session", self.store.update_session(session.id, update))
            logger.info("Session %s resumed", session.id)
            return await self._settle(updated, "resumed")

    def _ending(self, session: WorkoutSessionRead, status: SessionStatus,
                explicit_duration_seconds: Optional[float] = None, ) -> WorkoutSessionUpdate:
        now = self.clock.now()
        if explicit_duration_seconds is None:
            duration = compute_elapsed_seconds(session.started_at, session.paused_seconds, session.paused_at, now)
        else:
            duration = explicit_duration_seconds
        duration = max(session.total_duration_seconds, int(max(0.0, duration)))
        return WorkoutSessionUpdate(status=status, completed_at=now, paused_at=None,
                                    paused_seconds=closed_paused_seconds(session.paused_seconds,
                                                                         session.paused_at, now),
                                    total_duration_seconds=duration, )

    async def complete(self, explicit_duration_seconds: Optional[float] = None) -> WorkoutSessionRead:
        async with self.mutation():
            session = self._require_live()
            update = self._ending(session, SessionStatus.COMPLETED, explicit_duration_seconds)
            updated = await self.call("update_session", self.store.update_session(session.id, update))
            self._leave("completed")
            logger.info("Session %s completed after %ss", session.id, updated.total_duration_seconds)
            return updated

    async def cancel(self) -> WorkoutSessionRead:
        async with self.mutation():
            session = self._require_live()
            update = self._ending(session, SessionStatus.CANCELLED)
            updated = await self.call("update_session", self.store.update_session(session.id, update))
            self._leave("cancelled")
            logger.info("Session %s cancelled after %ss", session.id, updated.total_duration_seconds)
            return updated

    # ------------------------------------------------------------------
    # Exercise and rest timers
    # ------------------------------------------------------------------

    def select_exercise(self, exercise_id: str) -> EngineSnapshot:
        self._require_live()
        self.exercise_timer.select(exercise_id)
        return self.publish("exercise_selected")

    def finish_exercise(self) -> int:
        """Finish the current exercise; returns the seconds spent on it."""
        self._require_live()
        if self.exercise_timer.exercise_id is None:
            raise InvalidTransitionError("No exercise is selected")
        spent = self.exercise_timer.finish()
        self.publish("exercise_finished")
        return spent

    def select_rest_preset(self, seconds: int) -> EngineSnapshot:
        self.rest_timer.select_preset(seconds)
        return self.publish("rest_preset_selected")

    def start_rest(self, preset_seconds: Optional[int] = None,
                   duration_seconds: Optional[int] = None) -> EngineSnapshot:
        self._require_active("start a rest")
        if preset_seconds is not None:
            self.rest_timer.select_preset(preset_seconds)
        self.rest_timer.start(duration_seconds)
        return self.publish("rest_started")

    def skip_rest(self) -> bool:
        self._require_live()
        skipped = self.rest_timer.skip()
        if skipped:
            self.publish("rest_skipped")
        return skipped

    def reset_rest(self) -> EngineSnapshot:
        self.rest_timer.reset()
        return self.publish("rest_reset")

    # ------------------------------------------------------------------
    # Set ledger
    # ------------------------------------------------------------------

    async def record_set(self, exercise_id: str, data: Union[SetCreate, Mapping[str, Any]]) -> ExerciseSetRead:
        """Validate, persist and log a set, then start the rest countdown."""
        validated = validate_set_data(data)
        async with self.mutation():
            session = self._require_active("record a set")
            record = SetRecord(session_id=session.id, exercise_id=exercise_id,
                               set_number=self.ledger.next_set_number(exercise_id),
                               rest_duration_seconds=self.rest_timer.taken_seconds(),
                               completed_at=self.clock.now(), **validated.model_dump(), )
            created = await self.call("create_set", self.store.create_set(record))
            self.ledger.add(created)
            self.exercise_timer.select(exercise_id)
            self.rest_timer.start()
            self.publish("set_recorded")
            return created

    async def update_set(self, set_id: int, data: Union[SetUpdate, Mapping[str, Any]]) -> ExerciseSetRead:
        update = validate_set_update(data)
        async with self.mutation():
            self._require_active("edit a set")
            self.ledger.get(set_id)
            updated = await self.call("update_set", self.store.update_set(set_id, update))
            self.ledger.replace(updated)
            self.publish("set_updated")
            return updated

    async def delete_set(self, set_id: int) -> ExerciseSetRead:
        async with self.mutation():
            self._require_active("delete a set")
            entry = self.ledger.get(set_id)
            await self.call("delete_set", self.store.delete_set(set_id))
            self.ledger.remove(set_id)
            self.publish("set_deleted")
            return entry
