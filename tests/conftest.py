"""Shared fixtures: in-memory database, stores, clock and seed data."""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import pytest
from sqlmodel import Session

from app.db.init_db import init_db
from app.db.repositories import RoutineRepository, UserRepository, WorkoutSessionRepository
from app.db.session import make_engine
from app.engine.cache import InMemoryKeyValueStore, SelectedRoutineCache
from app.engine.clock import ManualClock
from app.engine.config import EngineConfig
from app.engine.store import RemoteStore, SqlModelRemoteStore
from app.models.routine import Routine, RoutineExercise
from app.models.user import User
from app.models.workout_session import SessionStatus, WorkoutSession


# ======================================================================
# Store wrapper with injectable failures
# ======================================================================


class FlakyStore(RemoteStore):
    """Delegates to a real store.

    Operations named in ``failing`` raise, operations named in ``hanging``
    never return, and operations named in ``lagging`` reach the real store
    and then never return (a write that commits after the caller gave up).
    """

    def __init__(self, inner: RemoteStore):
        self.inner = inner
        self.failing: set[str] = set()
        self.hanging: set[str] = set()
        self.lagging: set[str] = set()
        self.calls: list[str] = []

    async def _run(self, operation: str, call: Callable[[], Awaitable[Any]]) -> Any:
        self.calls.append(operation)
        if operation in self.hanging:
            await asyncio.sleep(3600)
        if operation in self.failing:
            raise ConnectionError(f"{operation}: network unreachable")
        result = await call()
        if operation in self.lagging:
            await asyncio.sleep(3600)
        return result

    async def create_session(self, data):
        return await self._run("create_session", lambda: self.inner.create_session(data))

    async def fetch_live_sessions(self, user_id):
        return await self._run("fetch_live_sessions", lambda: self.inner.fetch_live_sessions(user_id))

    async def get_session(self, session_id):
        return await self._run("get_session", lambda: self.inner.get_session(session_id))

    async def update_session(self, session_id, update):
        return await self._run("update_session", lambda: self.inner.update_session(session_id, update))

    async def fetch_history(self, user_id, limit):
        return await self._run("fetch_history", lambda: self.inner.fetch_history(user_id, limit))

    async def get_routine(self, routine_id):
        return await self._run("get_routine", lambda: self.inner.get_routine(routine_id))

    async def create_set(self, record):
        return await self._run("create_set", lambda: self.inner.create_set(record))

    async def update_set(self, set_id, update):
        return await self._run("update_set", lambda: self.inner.update_set(set_id, update))

    async def delete_set(self, set_id):
        return await self._run("delete_set", lambda: self.inner.delete_set(set_id))

    async def fetch_sets(self, session_id):
        return await self._run("fetch_sets", lambda: self.inner.fetch_sets(session_id))

    async def fetch_exercise_history(self, user_id, exercise_id, limit):
        return await self._run("fetch_exercise_history",
                               lambda: self.inner.fetch_exercise_history(user_id, exercise_id, limit))


# ======================================================================
# Seed data
# ======================================================================


class Seeder:
    """Writes fixture rows straight through the repositories."""

    def __init__(self, engine):
        self.engine = engine
        self._emails = 0

    def user(self, email: Optional[str] = None) -> int:
        self._emails += 1
        with Session(self.engine) as session:
            user = UserRepository(session).create(User(email=email or f"athlete{self._emails}@example.com"))
            return user.id

    def routine(self, user_id: int, exercises=("bench", "squat", "row"), name: str = "Push Day") -> int:
        with Session(self.engine) as session:
            routine = RoutineRepository(session).create(
                Routine(user_id=user_id, name=name),
                [RoutineExercise(routine_id=0, exercise_id=e) for e in exercises],
            )
            return routine.id

    def delete_routine(self, routine_id: int) -> None:
        with Session(self.engine) as session:
            RoutineRepository(session).delete(routine_id)

    def live_session(self, user_id: int, routine_id: Optional[int], started_at, name: str = "Leftover",
                     status: SessionStatus = SessionStatus.ACTIVE, ) -> int:
        with Session(self.engine) as session:
            entry = WorkoutSessionRepository(session).create(
                WorkoutSession(user_id=user_id, routine_id=routine_id, name=name, status=status,
                               started_at=started_at)
            )
            return entry.id

    def detach_routine(self, session_id: int) -> None:
        with Session(self.engine) as session:
            repository = WorkoutSessionRepository(session)
            entry = repository.get_by_id(session_id)
            entry.routine_id = None
            repository.update(entry)

    def session_row(self, session_id: int) -> WorkoutSession:
        with Session(self.engine) as session:
            return WorkoutSessionRepository(session).get_by_id(session_id)


# ======================================================================
# Fixtures
# ======================================================================


@pytest.fixture
def db_engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed(db_engine) -> Seeder:
    return Seeder(db_engine)


@pytest.fixture
def store(db_engine) -> SqlModelRemoteStore:
    return SqlModelRemoteStore(db_engine)


@pytest.fixture
def flaky_store(store) -> FlakyStore:
    return FlakyStore(store)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(remote_timeout_seconds=0.5)


@pytest.fixture
def key_values() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def routine_cache(key_values) -> SelectedRoutineCache:
    return SelectedRoutineCache(key_values)
