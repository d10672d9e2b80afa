"""Walk through a full workout against an in-memory database.

Starts a session on a 3-exercise routine, records sets, skips a rest,
pauses for five minutes and completes.  The manual clock makes the
printed timings exact: the session should total 20:00 of active time.

Usage:
    python scripts/simulate_workout.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlmodel import Session

from app.db.init_db import init_db
from app.db.repositories import RoutineRepository, UserRepository
from app.db.session import make_engine
from app.engine import EngineConfig, InMemoryKeyValueStore, ManualClock, SelectedRoutineCache, SqlModelRemoteStore
from app.engine.workout import WorkoutEngine
from app.models.routine import Routine, RoutineExercise
from app.models.user import User


def seed(db_engine) -> tuple[int, int]:
    with Session(db_engine) as session:
        user = UserRepository(session).create(User(email="demo@example.com", full_name="Demo Athlete"))
        routine = RoutineRepository(session).create(
            Routine(user_id=user.id, name="Push Day"),
            [RoutineExercise(routine_id=0, exercise_id=e) for e in ("bench_press", "overhead_press", "dips")],
        )
        return user.id, routine.id


def show(label: str, engine: WorkoutEngine) -> None:
    snap = engine.snapshot()
    rest = snap.rest_timer
    print(f"  {label:<22} status={snap.status.value:<7} elapsed={snap.elapsed_formatted:>6}  "
          f"rest={rest.state.value}({rest.remaining_seconds}s)")


async def main() -> None:
    db_engine = make_engine("sqlite://")
    init_db(db_engine)
    user_id, routine_id = seed(db_engine)

    clock = ManualClock()
    engine = WorkoutEngine(user_id, SqlModelRemoteStore(db_engine), SelectedRoutineCache(InMemoryKeyValueStore()),
                           clock, EngineConfig())

    print("=" * 70)
    print("Workout simulation")
    print("=" * 70)

    result = await engine.load()
    print(f"  recovery: {result.outcome.value}")

    await engine.start(routine_id)
    show("started", engine)

    await engine.record_set("bench_press", {"weight_kg": 50, "reps_completed": 10})
    show("set 1 recorded", engine)
    engine.skip_rest()
    show("rest skipped", engine)

    await engine.record_set("bench_press", {"weight_kg": 52.5, "reps_completed": 8})
    best = engine.exercise_view("bench_press").best_set
    print(f"  best set: {best.weight_kg}kg x {best.reps_completed}")

    clock.advance(600)
    await engine.pause()
    show("paused at 10:00", engine)

    clock.advance(300)
    show("5 minutes later", engine)

    await engine.resume()
    clock.advance(600)
    show("before completing", engine)

    completed = await engine.complete()
    summary = await engine.session_summary(completed.id)

    print()
    print(f"  {completed.name}: {summary.duration_formatted} active, "
          f"{summary.total_sets} sets, {summary.total_volume_kg:g} kg volume")
    for view in summary.exercises:
        labels = ", ".join(f"{s.label}: {s.weight_kg}x{s.reps_completed}" for s in view.sets)
        print(f"    {view.exercise_id}: {labels}")
    print("=" * 70)

    engine.close()


if __name__ == "__main__":
    asyncio.run(main())
