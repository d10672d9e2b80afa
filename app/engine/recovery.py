"""
Recovery and reconciliation.

Runs when an engine is loaded (process start, page reload, user
switch) and before any timer starts.  The store is authoritative:

1. no live session: the engine stays at ``NONE`` and the cached
   selected routine is re-validated;
2. one valid live session: it is adopted with its sets, timers restart
   from zero and elapsed time is derived from ``started_at``;
3. an orphan: it is completed with zero duration, then as case 1.

Several live sessions break the one-live-session invariant; the newest
valid one wins and the rest are cancelled.

Recovery never raises.  Any failure leaves the engine at ``NONE`` and
is reported on the :class:`RecoveryResult`.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.core.errors import PersistenceError, WorkoutError
from app.engine.cache import SelectedRoutineCache
from app.engine.state_machine import SessionStateMachine
from app.schemas.workout_session import WorkoutSessionRead

logger = logging.getLogger(__name__)


class RecoveryOutcome(str, Enum):
    NONE = "none"
    RESUMED = "resumed"
    ORPHAN_REPAIRED = "orphan_repaired"
    FAILED = "failed"


class RecoveryResult(BaseModel):
    """What a recovery run found and did."""

    outcome: RecoveryOutcome
    session: Optional[WorkoutSessionRead] = None
    repaired_session_ids: list[int] = Field(default_factory=list)
    cancelled_session_ids: list[int] = Field(default_factory=list)
    selected_routine_id: Optional[int] = None
    error: Optional[str] = None


class RecoveryService:
    """Reconciles a state machine with the store on load."""

    def __init__(self, machine: SessionStateMachine, cache: SelectedRoutineCache):
        self.machine = machine
        self.cache = cache

    async def recover(self) -> RecoveryResult:
        machine = self.machine
        repaired: list[int] = []
        cancelled: list[int] = []
        adopted: Optional[WorkoutSessionRead] = None
        try:
            async with machine.mutation():
                machine.reset_local()
                live = await machine.call("fetch_live_sessions", machine.store.fetch_live_sessions(machine.user_id))
                for session in live:
                    if await machine.is_orphan(session):
                        await machine.repair_orphan(session)
                        repaired.append(session.id)
                    elif adopted is None:
                        adopted = session
                    else:
                        await machine.cancel_stale(session)
                        cancelled.append(session.id)

                if adopted is not None and await machine.adopt(adopted) is None:
                    repaired.append(adopted.id)
                    adopted = None
                if adopted is None:
                    machine.publish("orphan_repaired" if repaired else "loaded")
        except WorkoutError as e:
            logger.error("Recovery for user %s failed: %s", machine.user_id, e)
            return RecoveryResult(outcome=RecoveryOutcome.FAILED, repaired_session_ids=repaired,
                                  cancelled_session_ids=cancelled, error=str(e), )

        if adopted is not None:
            return RecoveryResult(outcome=RecoveryOutcome.RESUMED, session=adopted, cancelled_session_ids=cancelled,
                                  repaired_session_ids=repaired, )

        return RecoveryResult(outcome=RecoveryOutcome.ORPHAN_REPAIRED if repaired else RecoveryOutcome.NONE,
                              repaired_session_ids=repaired, selected_routine_id=await self.validate_selected_routine(), )

    async def validate_selected_routine(self) -> Optional[int]:
        """The cached routine id if it still resolves.

        Dangling entries are dropped silently; a transient store failure
        keeps the entry for the next attempt.
        """
        user_id = self.machine.user_id
        routine_id = self.cache.get(user_id)
        if routine_id is None:
            return None
        try:
            routine = await self.machine.resolve_routine(routine_id)
        except PersistenceError as e:
            logger.warning("Could not validate selected routine %s for user %s: %s", routine_id, user_id, e)
            return routine_id
        if routine is None:
            logger.info("Selected routine %s no longer exists, clearing it for user %s", routine_id, user_id)
            self.cache.clear(user_id)
            return None
        return routine_id
