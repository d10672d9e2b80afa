"""Tests for the session state machine: lifecycle, timers, ledger and failures."""

import asyncio

import pytest

from app.core.errors import (ActiveSessionExistsError, InvalidRoutineError, InvalidTransitionError, NotFoundError,
                             PersistenceError, SessionBusyError, SetValidationError, )
from app.engine.state_machine import SessionStateMachine
from app.models.workout_session import SessionStatus
from app.schemas.engine import EngineStatus
from app.schemas.timers import RestTimerState


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def athlete(seed):
    user_id = seed.user()
    return user_id, seed.routine(user_id)


@pytest.fixture
def machine(flaky_store, clock, config, athlete):
    return SessionStateMachine(athlete[0], flaky_store, clock, config)


# ======================================================================
# Reference scenario
# ======================================================================


class TestWorkoutScenario:
    @pytest.mark.asyncio
    async def test_pause_resume_complete_totals_active_time(self, machine, clock, athlete, seed):
        events = []
        machine.bus.subscribe(lambda snapshot: events.append(snapshot.event))
        _, routine_id = athlete

        session = await machine.start(routine_id)
        assert machine.status == EngineStatus.ACTIVE
        assert machine.ticking

        await machine.record_set("bench", {"weight_kg": 50, "reps_completed": 10, "set_type": "normal"})
        assert machine.rest_timer.state == RestTimerState.RUNNING
        assert machine.rest_timer.duration_seconds == 90

        assert machine.skip_rest() is True
        second = await machine.record_set("bench", {"weight_kg": 52.5, "reps_completed": 8})
        assert machine.ledger.view("bench").best_set.id == second.id
        assert second.set_number == 2
        assert second.rest_duration_seconds == 0

        clock.advance(600)
        await machine.pause()
        assert machine.status == EngineStatus.PAUSED
        assert not machine.ticking

        clock.advance(300)
        assert machine.elapsed_seconds() == 600

        await machine.resume()
        assert machine.status == EngineStatus.ACTIVE
        clock.advance(600)

        completed = await machine.complete()
        assert completed.total_duration_seconds == 1200
        assert completed.status == SessionStatus.COMPLETED
        assert machine.status == EngineStatus.NONE
        assert machine.session is None
        assert len(machine.ledger) == 0
        assert not machine.ticking

        row = seed.session_row(session.id)
        assert row.paused_seconds == 300
        assert row.paused_at is None
        assert row.total_duration_seconds == 1200

        for expected in ("started", "set_recorded", "rest_skipped", "paused", "resumed", "completed"):
            assert expected in events


# ======================================================================
# start
# ======================================================================


class TestStart:
    @pytest.mark.asyncio
    async def test_default_name(self, machine, athlete):
        session = await machine.start(athlete[1])
        assert session.name == "Push Day - 2024-01-01"
        machine.close()

    @pytest.mark.asyncio
    async def test_name_override_and_extras(self, machine, athlete):
        session = await machine.start(athlete[1], name="Morning push", notes="felt good", location="Home gym")
        assert session.name == "Morning push"
        assert session.location == "Home gym"
        machine.close()

    @pytest.mark.asyncio
    async def test_routine_without_exercises(self, machine, seed, athlete, flaky_store):
        empty = seed.routine(athlete[0], exercises=())
        with pytest.raises(InvalidRoutineError):
            await machine.start(empty)
        assert machine.status == EngineStatus.NONE
        assert "create_session" not in flaky_store.calls

    @pytest.mark.asyncio
    async def test_unknown_routine(self, machine):
        with pytest.raises(NotFoundError):
            await machine.start(999)

    @pytest.mark.asyncio
    async def test_someone_elses_routine(self, machine, seed):
        stranger = seed.user()
        with pytest.raises(NotFoundError):
            await machine.start(seed.routine(stranger))

    @pytest.mark.asyncio
    async def test_second_start_rejected(self, machine, athlete, store):
        first = await machine.start(athlete[1])
        with pytest.raises(ActiveSessionExistsError):
            await machine.start(athlete[1])
        live = await store.fetch_live_sessions(athlete[0])
        assert [s.id for s in live] == [first.id]
        machine.close()

    @pytest.mark.asyncio
    async def test_live_session_in_store_blocks_start(self, flaky_store, clock, config, athlete):
        other_device = SessionStateMachine(athlete[0], flaky_store, clock, config)
        await other_device.start(athlete[1])

        machine = SessionStateMachine(athlete[0], flaky_store, clock, config)
        with pytest.raises(ActiveSessionExistsError):
            await machine.start(athlete[1])
        assert machine.session.id == other_device.session.id
        assert machine.status == EngineStatus.ACTIVE
        other_device.close()
        machine.close()

    @pytest.mark.asyncio
    async def test_start_that_committed_after_timing_out_is_taken_over(self, machine, athlete, flaky_store, store):
        flaky_store.lagging = {"create_session"}
        with pytest.raises(PersistenceError):
            await machine.start(athlete[1])
        assert machine.status == EngineStatus.NONE
        [committed] = await store.fetch_live_sessions(athlete[0])

        flaky_store.lagging = set()
        with pytest.raises(ActiveSessionExistsError):
            await machine.start(athlete[1])
        assert machine.session.id == committed.id
        assert machine.status == EngineStatus.ACTIVE

        await machine.pause()
        assert machine.status == EngineStatus.PAUSED
        cancelled = await machine.cancel()
        assert cancelled.id == committed.id
        assert await store.fetch_live_sessions(athlete[0]) == []

    @pytest.mark.asyncio
    async def test_orphan_in_store_is_repaired_before_start(self, machine, seed, athlete, clock):
        orphan_id = seed.live_session(athlete[0], None, clock.now())
        session = await machine.start(athlete[1])

        orphan = seed.session_row(orphan_id)
        assert orphan.status == SessionStatus.COMPLETED
        assert orphan.total_duration_seconds == 0
        assert session.id != orphan_id
        machine.close()

    @pytest.mark.asyncio
    async def test_store_failure_leaves_no_session(self, machine, athlete, flaky_store):
        flaky_store.failing = {"create_session"}
        with pytest.raises(PersistenceError):
            await machine.start(athlete[1])
        assert machine.session is None
        assert not machine.ticking

        flaky_store.failing = set()
        assert (await machine.start(athlete[1])).status == SessionStatus.ACTIVE
        machine.close()


# ======================================================================
# pause / resume / complete / cancel
# ======================================================================


class TestTransitions:
    @pytest.mark.asyncio
    async def test_transitions_need_a_session(self, machine):
        for operation in (machine.pause, machine.resume, machine.complete, machine.cancel):
            with pytest.raises(InvalidTransitionError):
                await operation()

    @pytest.mark.asyncio
    async def test_pause_and_resume_are_idempotent(self, machine, athlete, flaky_store):
        await machine.start(athlete[1])
        await machine.pause()
        updates = flaky_store.calls.count("update_session")

        again = await machine.pause()
        assert again.status == SessionStatus.PAUSED
        assert flaky_store.calls.count("update_session") == updates

        await machine.resume()
        await machine.resume()
        assert flaky_store.calls.count("update_session") == updates + 1
        machine.close()

    @pytest.mark.asyncio
    async def test_failed_pause_keeps_session_active(self, machine, athlete, flaky_store):
        await machine.start(athlete[1])
        flaky_store.failing = {"update_session"}

        with pytest.raises(PersistenceError):
            await machine.pause()
        assert machine.status == EngineStatus.ACTIVE
        assert machine.ticking

        flaky_store.failing = set()
        await machine.pause()
        assert machine.status == EngineStatus.PAUSED

    @pytest.mark.asyncio
    async def test_timed_out_call_is_a_persistence_error(self, machine, athlete, flaky_store):
        await machine.start(athlete[1])
        flaky_store.hanging = {"update_session"}
        with pytest.raises(PersistenceError):
            await machine.pause()
        assert machine.status == EngineStatus.ACTIVE
        machine.close()

    @pytest.mark.asyncio
    async def test_concurrent_mutation_is_rejected(self, machine, athlete, flaky_store):
        await machine.start(athlete[1])
        flaky_store.hanging = {"update_session"}

        pending = asyncio.create_task(machine.pause())
        await _settle()
        assert machine.busy
        with pytest.raises(SessionBusyError):
            await machine.cancel()

        with pytest.raises(PersistenceError):
            await pending
        assert not machine.busy
        machine.close()

    @pytest.mark.asyncio
    async def test_pause_suspends_timers(self, machine, athlete, clock):
        await machine.start(athlete[1])
        machine.select_exercise("bench")
        machine.start_rest(preset_seconds=60)
        clock.advance(20)

        await machine.pause()
        clock.advance(500)
        snapshot = machine.snapshot()
        assert snapshot.is_paused
        assert snapshot.rest_timer.is_suspended
        assert snapshot.rest_timer.remaining_seconds == 40
        assert snapshot.exercise_timer.elapsed_seconds == 20
        assert snapshot.exercise_timer.is_running is False

        await machine.resume()
        clock.advance(5)
        snapshot = machine.snapshot()
        assert snapshot.rest_timer.remaining_seconds == 35
        assert snapshot.exercise_timer.elapsed_seconds == 25
        machine.close()

    @pytest.mark.asyncio
    async def test_complete_while_paused_excludes_open_pause(self, machine, athlete, clock):
        await machine.start(athlete[1])
        clock.advance(100)
        await machine.pause()
        clock.advance(50)
        completed = await machine.complete()
        assert completed.total_duration_seconds == 100
        assert completed.paused_seconds == 50

    @pytest.mark.asyncio
    async def test_complete_with_explicit_duration(self, machine, athlete, clock):
        await machine.start(athlete[1])
        clock.advance(100)
        assert (await machine.complete(45)).total_duration_seconds == 45

    @pytest.mark.asyncio
    async def test_cancel_keeps_duration_for_audit(self, machine, athlete, clock):
        await machine.start(athlete[1])
        clock.advance(300)
        cancelled = await machine.cancel()
        assert cancelled.status == SessionStatus.CANCELLED
        assert cancelled.total_duration_seconds == 300
        assert machine.status == EngineStatus.NONE

    @pytest.mark.asyncio
    async def test_orphaned_on_pause_is_repaired(self, machine, athlete, seed):
        session = await machine.start(athlete[1])
        seed.detach_routine(session.id)

        assert await machine.pause() is None
        assert machine.status == EngineStatus.NONE
        assert machine.orphans_repaired == 1
        row = seed.session_row(session.id)
        assert row.status == SessionStatus.COMPLETED
        assert row.total_duration_seconds == 0


# ======================================================================
# Ticks
# ======================================================================


class TestTicks:
    @pytest.mark.asyncio
    async def test_tick_and_rest_elapsed_events(self, machine, athlete, clock):
        events = []
        machine.bus.subscribe(lambda snapshot: events.append(snapshot.event))
        await machine.start(athlete[1])
        await _settle()

        clock.advance(1)
        await _settle()
        assert events[-1] == "tick"

        machine.start_rest(preset_seconds=30)
        for _ in range(30):
            clock.advance(1)
            await _settle()
        assert "rest_elapsed" in events
        assert machine.rest_timer.state == RestTimerState.ELAPSED
        machine.close()


# ======================================================================
# Set ledger through the state machine
# ======================================================================


class TestSets:
    @pytest.mark.asyncio
    async def test_validation_happens_before_the_store(self, machine, athlete, flaky_store):
        await machine.start(athlete[1])
        with pytest.raises(SetValidationError) as exc:
            await machine.record_set("bench", {"weight_kg": -1, "reps_completed": 0, "rpe_score": 12})
        assert set(exc.value.fields) == {"weight_kg", "reps_completed", "rpe_score"}
        assert "create_set" not in flaky_store.calls
        machine.close()

    @pytest.mark.asyncio
    async def test_failed_record_changes_nothing(self, machine, athlete, flaky_store):
        await machine.start(athlete[1])
        flaky_store.failing = {"create_set"}
        with pytest.raises(PersistenceError):
            await machine.record_set("bench", {"weight_kg": 50, "reps_completed": 10})
        assert len(machine.ledger) == 0
        assert machine.rest_timer.state == RestTimerState.IDLE
        machine.close()

    @pytest.mark.asyncio
    async def test_recording_selects_the_exercise(self, machine, athlete):
        await machine.start(athlete[1])
        await machine.record_set("squat", {"weight_kg": 100, "reps_completed": 5})
        assert machine.exercise_timer.exercise_id == "squat"
        machine.close()

    @pytest.mark.asyncio
    async def test_no_sets_while_paused(self, machine, athlete):
        await machine.start(athlete[1])
        await machine.pause()
        with pytest.raises(InvalidTransitionError):
            await machine.record_set("bench", {"weight_kg": 50, "reps_completed": 10})
        with pytest.raises(InvalidTransitionError):
            machine.start_rest()

    @pytest.mark.asyncio
    async def test_update_and_delete(self, machine, athlete):
        await machine.start(athlete[1])
        first = await machine.record_set("bench", {"weight_kg": 50, "reps_completed": 10})
        best = await machine.record_set("bench", {"weight_kg": 60, "reps_completed": 5})
        third = await machine.record_set("bench", {"weight_kg": 55, "reps_completed": 6})

        updated = await machine.update_set(first.id, {"reps_completed": 12})
        assert updated.reps_completed == 12
        assert machine.ledger.get(first.id).reps_completed == 12

        await machine.delete_set(best.id)
        assert machine.ledger.view("bench").best_set.id == third.id
        machine.close()

    @pytest.mark.asyncio
    async def test_unknown_set(self, machine, athlete):
        await machine.start(athlete[1])
        with pytest.raises(NotFoundError):
            await machine.update_set(999, {"reps_completed": 3})
        with pytest.raises(NotFoundError):
            await machine.delete_set(999)
        machine.close()

    @pytest.mark.asyncio
    async def test_sets_are_closed_after_completion(self, machine, athlete):
        await machine.start(athlete[1])
        entry = await machine.record_set("bench", {"weight_kg": 50, "reps_completed": 10})
        await machine.complete()
        with pytest.raises(InvalidTransitionError):
            await machine.update_set(entry.id, {"reps_completed": 3})
        with pytest.raises(InvalidTransitionError):
            await machine.delete_set(entry.id)

    @pytest.mark.asyncio
    async def test_finish_exercise_needs_a_selection(self, machine, athlete, clock):
        await machine.start(athlete[1])
        with pytest.raises(InvalidTransitionError):
            machine.finish_exercise()
        machine.select_exercise("bench")
        clock.advance(42)
        assert machine.finish_exercise() == 42
        assert machine.exercise_timer.time_exercising_seconds == 42
        machine.close()
