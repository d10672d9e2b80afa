"""
Remote store.

The authoritative record of sessions and sets.  :class:`RemoteStore` is
the interface the engine talks to; :class:`SqlModelRemoteStore` backs it
with the SQLModel repositories, running the blocking database work in a
worker thread so the event loop keeps ticking.

Every call goes through :func:`call_store`, which applies the remote
timeout and turns any failure into a :class:`PersistenceError`.  A
failed call never leaves a partial write visible to the engine.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.dates import utcnow
from app.core.errors import NotFoundError, PersistenceError, WorkoutError
from app.db.repositories import (ExerciseSetRepository, RoutineRepository, WorkoutSessionRepository, )
from app.models.exercise_set import ExerciseSet, SetType
from app.models.routine import Routine, RoutineExercise
from app.models.workout_session import WorkoutSession
from app.schemas.exercise_set import ExerciseSetRead, SetRecord, SetUpdate
from app.schemas.routine import RoutineCreate, RoutineExerciseRead, RoutineRead
from app.schemas.workout_session import (WorkoutSessionCreate, WorkoutSessionRead, WorkoutSessionUpdate, )

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_store(operation: str, awaitable: Awaitable[T], timeout: float) -> T:
    """Await a remote call under ``timeout`` seconds.

    Engine errors raised by the store (``NotFoundError``, ...) pass
    through; timeouts and anything unexpected become ``PersistenceError``.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Remote call '%s' timed out after %.1fs", operation, timeout)
        raise PersistenceError(operation, f"timed out after {timeout:g}s")
    except WorkoutError:
        raise
    except Exception as e:
        logger.exception("Remote call '%s' failed", operation)
        raise PersistenceError(operation, str(e)) from e


class RemoteStore(ABC):
    """Interface to the authoritative session and set records."""

    # -- sessions -------------------------------------------------------

    @abstractmethod
    async def create_session(self, data: WorkoutSessionCreate) -> WorkoutSessionRead:
        ...

    @abstractmethod
    async def fetch_live_sessions(self, user_id: int) -> list[WorkoutSessionRead]:
        """Active and paused sessions of a user, newest first."""
        ...

    @abstractmethod
    async def get_session(self, session_id: int) -> WorkoutSessionRead:
        ...

    @abstractmethod
    async def update_session(self, session_id: int, update: WorkoutSessionUpdate) -> WorkoutSessionRead:
        ...

    @abstractmethod
    async def fetch_history(self, user_id: int, limit: int) -> list[WorkoutSessionRead]:
        """Completed and cancelled sessions of a user, newest first."""
        ...

    async def fetch_active_session(self, user_id: int) -> Optional[WorkoutSessionRead]:
        """The newest live session of a user, if any."""
        sessions = await self.fetch_live_sessions(user_id)
        return sessions[0] if sessions else None

    # -- routines -------------------------------------------------------

    @abstractmethod
    async def get_routine(self, routine_id: int) -> Optional[RoutineRead]:
        """The routine with its exercises, ``None`` when it does not exist."""
        ...

    # -- sets -----------------------------------------------------------

    @abstractmethod
    async def create_set(self, record: SetRecord) -> ExerciseSetRead:
        ...

    @abstractmethod
    async def update_set(self, set_id: int, update: SetUpdate) -> ExerciseSetRead:
        ...

    @abstractmethod
    async def delete_set(self, set_id: int) -> None:
        ...

    @abstractmethod
    async def fetch_sets(self, session_id: int) -> list[ExerciseSetRead]:
        """Sets of a session in recording order."""
        ...

    @abstractmethod
    async def fetch_exercise_history(self, user_id: int, exercise_id: str, limit: int) -> list[ExerciseSetRead]:
        """``normal`` sets of an exercise across the user's sessions, newest first."""
        ...


class SqlModelRemoteStore(RemoteStore):
    """Remote store over the SQLModel repositories."""

    def __init__(self, engine: Engine):
        self.engine = engine

    async def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        def job() -> T:
            with Session(self.engine) as session:
                try:
                    return work(session)
                except SQLAlchemyError as e:
                    session.rollback()
                    raise PersistenceError(operation, str(e)) from e

        return await asyncio.to_thread(job)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(self, data: WorkoutSessionCreate) -> WorkoutSessionRead:
        def work(session: Session) -> WorkoutSessionRead:
            entry = WorkoutSession(**data.model_dump())
            entry = WorkoutSessionRepository(session).create(entry)
            return WorkoutSessionRead.model_validate(entry)

        return await self._run("create_session", work)

    async def fetch_live_sessions(self, user_id: int) -> list[WorkoutSessionRead]:
        def work(session: Session) -> list[WorkoutSessionRead]:
            entries = WorkoutSessionRepository(session).get_live_by_user(user_id)
            return [WorkoutSessionRead.model_validate(e) for e in entries]

        return await self._run("fetch_live_sessions", work)

    async def get_session(self, session_id: int) -> WorkoutSessionRead:
        def work(session: Session) -> WorkoutSessionRead:
            entry = WorkoutSessionRepository(session).get_by_id(session_id)
            if entry is None:
                raise NotFoundError(f"Workout session {session_id} not found")
            return WorkoutSessionRead.model_validate(entry)

        return await self._run("get_session", work)

    async def update_session(self, session_id: int, update: WorkoutSessionUpdate) -> WorkoutSessionRead:
        def work(session: Session) -> WorkoutSessionRead:
            repository = WorkoutSessionRepository(session)
            entry = repository.get_by_id(session_id)
            if entry is None:
                raise NotFoundError(f"Workout session {session_id} not found")
            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(entry, field, value)
            entry.updated_at = utcnow()
            entry = repository.update(entry)
            return WorkoutSessionRead.model_validate(entry)

        return await self._run("update_session", work)

    async def fetch_history(self, user_id: int, limit: int) -> list[WorkoutSessionRead]:
        def work(session: Session) -> list[WorkoutSessionRead]:
            entries = WorkoutSessionRepository(session).get_history_by_user(user_id, limit=limit)
            return [WorkoutSessionRead.model_validate(e) for e in entries]

        return await self._run("fetch_history", work)

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    async def get_routine(self, routine_id: int) -> Optional[RoutineRead]:
        def work(session: Session) -> Optional[RoutineRead]:
            return load_routine(RoutineRepository(session), routine_id)

        return await self._run("get_routine", work)

    async def create_routine(self, user_id: int, data: RoutineCreate) -> RoutineRead:
        def work(session: Session) -> RoutineRead:
            return save_routine(RoutineRepository(session), user_id, data)

        return await self._run("create_routine", work)

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    async def create_set(self, record: SetRecord) -> ExerciseSetRead:
        def work(session: Session) -> ExerciseSetRead:
            entry = ExerciseSetRepository(session).create(ExerciseSet(**record.model_dump()))
            return ExerciseSetRead.model_validate(entry)

        return await self._run("create_set", work)

    async def update_set(self, set_id: int, update: SetUpdate) -> ExerciseSetRead:
        def work(session: Session) -> ExerciseSetRead:
            repository = ExerciseSetRepository(session)
            entry = repository.get_by_id(set_id)
            if entry is None:
                raise NotFoundError(f"Set {set_id} not found")
            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(entry, field, value)
            return ExerciseSetRead.model_validate(repository.update(entry))

        return await self._run("update_set", work)

    async def delete_set(self, set_id: int) -> None:
        def work(session: Session) -> None:
            if not ExerciseSetRepository(session).delete(set_id):
                raise NotFoundError(f"Set {set_id} not found")

        await self._run("delete_set", work)

    async def fetch_sets(self, session_id: int) -> list[ExerciseSetRead]:
        def work(session: Session) -> list[ExerciseSetRead]:
            entries = ExerciseSetRepository(session).get_by_session(session_id)
            return [ExerciseSetRead.model_validate(e) for e in entries]

        return await self._run("fetch_sets", work)

    async def fetch_exercise_history(self, user_id: int, exercise_id: str, limit: int) -> list[ExerciseSetRead]:
        def work(session: Session) -> list[ExerciseSetRead]:
            entries = ExerciseSetRepository(session).get_user_history(user_id, exercise_id,
                                                                      set_type=SetType.NORMAL, limit=limit)
            return [ExerciseSetRead.model_validate(e) for e in entries]

        return await self._run("fetch_exercise_history", work)


# ======================================================================
# Routine helpers shared with the routine service
# ======================================================================


def load_routine(repository: RoutineRepository, routine_id: int) -> Optional[RoutineRead]:
    routine = repository.get_by_id(routine_id)
    if routine is None:
        return None
    exercises = [RoutineExerciseRead.model_validate(e) for e in repository.get_exercises(routine_id)]
    return RoutineRead(id=routine.id, user_id=routine.user_id, name=routine.name, description=routine.description,
                       exercises=exercises, created_at=routine.created_at, )


def save_routine(repository: RoutineRepository, user_id: int, data: RoutineCreate) -> RoutineRead:
    routine = Routine(user_id=user_id, name=data.name, description=data.description)
    exercises = [RoutineExercise(routine_id=0, exercise_id=e.exercise_id, target_sets=e.target_sets,
                                 target_reps=e.target_reps) for e in data.exercises]
    routine = repository.create(routine, exercises)
    return load_routine(repository, routine.id)
