"""Tests for the per-user engine facade and the engine registry."""

import pytest

from app.core.errors import InvalidRoutineError, NotFoundError, PersistenceError
from app.engine.config import EngineConfig
from app.engine.registry import EngineRegistry
from app.engine.workout import WorkoutEngine
from app.models.workout_session import SessionStatus
from app.schemas.engine import EngineStatus


@pytest.fixture
def athlete(seed):
    user_id = seed.user()
    return user_id, seed.routine(user_id)


@pytest.fixture
def engine(store, routine_cache, clock, config, athlete):
    return WorkoutEngine(athlete[0], store, routine_cache, clock, config)


# ======================================================================
# EngineConfig
# ======================================================================


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.rest_presets == [30, 60, 90, 120, 180, 300]
        assert config.default_rest_seconds == 90
        assert config.tick_seconds == 1.0

    def test_default_rest_must_be_a_preset(self):
        with pytest.raises(ValueError):
            EngineConfig(default_rest_seconds=45)

    def test_from_settings(self):
        config = EngineConfig.from_settings()
        assert config.remote_timeout_seconds == 10.0
        assert config.history_limit == 10


# ======================================================================
# Selected routine
# ======================================================================


class TestSelectedRoutine:
    @pytest.mark.asyncio
    async def test_select_and_start_clears_it(self, engine, athlete):
        await engine.select_routine(athlete[1])
        assert engine.selected_routine() == athlete[1]

        await engine.start(athlete[1])
        assert engine.selected_routine() is None
        engine.close()

    @pytest.mark.asyncio
    async def test_cannot_select_unknown_routine(self, engine):
        with pytest.raises(NotFoundError):
            await engine.select_routine(404)

    @pytest.mark.asyncio
    async def test_cannot_select_empty_routine(self, engine, seed, athlete):
        with pytest.raises(InvalidRoutineError):
            await engine.select_routine(seed.routine(athlete[0], exercises=()))

    def test_clear(self, engine, athlete, routine_cache):
        routine_cache.set(athlete[0], athlete[1])
        engine.clear_selected_routine()
        assert engine.selected_routine() is None


# ======================================================================
# History, summary and performance
# ======================================================================


class TestHistory:
    @pytest.mark.asyncio
    async def test_completed_sessions_are_listed(self, engine, athlete, clock):
        await engine.start(athlete[1])
        clock.advance(60)
        completed = await engine.complete()

        assert [s.id for s in await engine.history()] == [completed.id]
        assert [s.id for s in engine.recent_sessions] == [completed.id]

    @pytest.mark.asyncio
    async def test_orphan_repaired_on_pause_refreshes_history(self, engine, athlete, seed):
        snapshot = await engine.start(athlete[1])
        assert engine.recent_sessions == []
        seed.detach_routine(snapshot.session.id)

        paused = await engine.pause()
        assert paused.status == EngineStatus.NONE
        assert [s.id for s in engine.recent_sessions] == [snapshot.session.id]
        assert engine.recent_sessions[0].total_duration_seconds == 0

    @pytest.mark.asyncio
    async def test_orphan_repaired_before_start_refreshes_history(self, engine, athlete, seed, clock):
        orphan_id = seed.live_session(athlete[0], None, clock.now())
        await engine.start(athlete[1])
        assert [s.id for s in engine.recent_sessions] == [orphan_id]
        engine.close()

    @pytest.mark.asyncio
    async def test_history_refresh_failure_does_not_fail_the_transition(self, engine, athlete, monkeypatch):
        await engine.start(athlete[1])

        async def unreachable(limit=None):
            raise PersistenceError("fetch_history", "network unreachable")

        monkeypatch.setattr(engine, "history", unreachable)
        completed = await engine.complete()
        assert completed.status == SessionStatus.COMPLETED
        assert engine.recent_sessions == []

    @pytest.mark.asyncio
    async def test_history_refresh_does_not_hide_programming_errors(self, engine, athlete, monkeypatch):
        await engine.start(athlete[1])

        async def broken(limit=None):
            raise TypeError("bad argument")

        monkeypatch.setattr(engine, "history", broken)
        with pytest.raises(TypeError):
            await engine.complete()

    @pytest.mark.asyncio
    async def test_summary_of_finished_session(self, engine, athlete, clock):
        await engine.start(athlete[1])
        await engine.record_set("bench", {"weight_kg": 50, "reps_completed": 10})
        await engine.record_set("squat", {"weight_kg": 100, "reps_completed": 5})
        clock.advance(1800)
        completed = await engine.complete()

        summary = await engine.session_summary(completed.id)
        assert summary.total_exercises == 2
        assert summary.total_sets == 2
        assert summary.total_volume_kg == 1000
        assert summary.duration_formatted == "30:00"

    @pytest.mark.asyncio
    async def test_summary_of_live_session_uses_elapsed(self, engine, athlete, clock):
        snapshot = await engine.start(athlete[1])
        clock.advance(75)
        summary = await engine.session_summary(snapshot.session.id)
        assert summary.duration_formatted == "1:15"
        engine.close()

    @pytest.mark.asyncio
    async def test_summary_of_someone_elses_session(self, engine, seed, store, routine_cache, clock, config):
        stranger = seed.user()
        theirs = WorkoutEngine(stranger, store, routine_cache, clock, config)
        await theirs.start(seed.routine(stranger))
        done = await theirs.complete()

        with pytest.raises(NotFoundError):
            await engine.session_summary(done.id)

    @pytest.mark.asyncio
    async def test_performance_and_personal_record(self, engine, athlete, clock):
        await engine.start(athlete[1])
        await engine.record_set("bench", {"weight_kg": 20, "reps_completed": 10, "set_type": "warmup"})
        await engine.record_set("bench", {"weight_kg": 60, "reps_completed": 5})
        clock.advance(60)
        await engine.record_set("bench", {"weight_kg": 55, "reps_completed": 8})
        await engine.complete()

        performance = await engine.exercise_performance("bench")
        assert performance.last.weight_kg == 55
        assert performance.best.weight_kg == 60
        assert await engine.is_personal_record("bench", 60, 6)
        assert not await engine.is_personal_record("bench", 57.5, 10)

        assert not (await engine.exercise_performance("deadlift")).has_history


# ======================================================================
# Registry
# ======================================================================


class TestEngineRegistry:
    @pytest.mark.asyncio
    async def test_builds_and_loads_once(self, store, routine_cache, clock, config, athlete):
        built = []

        def factory(user_id):
            built.append(user_id)
            return WorkoutEngine(user_id, store, routine_cache, clock, config)

        registry = EngineRegistry(factory)
        first = await registry.get(athlete[0])
        second = await registry.get(athlete[0])

        assert first is second
        assert built == [athlete[0]]
        assert first.last_recovery is not None
        assert athlete[0] in registry
        registry.close()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_engines_are_per_user(self, store, routine_cache, clock, config, athlete, seed):
        registry = EngineRegistry(lambda uid: WorkoutEngine(uid, store, routine_cache, clock, config))
        mine = await registry.get(athlete[0])
        theirs = await registry.get(seed.user())

        await mine.start(athlete[1])
        assert mine.snapshot().is_active
        assert theirs.snapshot().status.value == "none"
        registry.close()
