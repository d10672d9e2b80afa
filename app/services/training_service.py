"""
Training service.

HTTP-facing wrapper around a user's :class:`WorkoutEngine`.  Engine
errors are translated into ``HTTPException`` here so endpoints stay
one-liners.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException, status

from app.core.errors import (ActiveSessionExistsError, InvalidRoutineError, InvalidTransitionError, NotFoundError,
                             PersistenceError, SessionBusyError, SetValidationError, WorkoutError, )
from app.engine.workout import WorkoutEngine
from app.schemas.engine import EngineSnapshot, SessionSummary
from app.schemas.exercise_set import ExerciseLedgerView, ExercisePerformance, ExerciseSetRead, SetCreate, SetUpdate
from app.schemas.timers import RestTimerStart
from app.schemas.workout_session import SelectedRoutine, SessionComplete, SessionStart, WorkoutSessionRead


@contextmanager
def http_errors() -> Iterator[None]:
    """Translate engine errors into HTTP errors."""
    try:
        yield
    except SetValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                            detail={ "message": "Invalid set data", "fields": e.fields }, )
    except InvalidRoutineError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (ActiveSessionExistsError, InvalidTransitionError, SessionBusyError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            detail=f"Change not saved, please retry ({e})", )
    except WorkoutError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValueError as e:
        # Rest timer presets and durations
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


class TrainingService:
    """Service for the active workout of one user."""

    def __init__(self, engine: WorkoutEngine):
        self.engine = engine

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    async def start(self, data: SessionStart) -> EngineSnapshot:
        with http_errors():
            return await self.engine.start(data.routine_id, name=data.name, notes=data.notes,
                                           location=data.location)

    async def pause(self) -> EngineSnapshot:
        with http_errors():
            return await self.engine.pause()

    async def resume(self) -> EngineSnapshot:
        with http_errors():
            return await self.engine.resume()

    async def complete(self, data: SessionComplete) -> WorkoutSessionRead:
        with http_errors():
            return await self.engine.complete(data.duration_seconds)

    async def cancel(self) -> WorkoutSessionRead:
        with http_errors():
            return await self.engine.cancel()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def select_exercise(self, exercise_id: str) -> EngineSnapshot:
        with http_errors():
            return self.engine.select_exercise(exercise_id)

    def finish_exercise(self) -> EngineSnapshot:
        with http_errors():
            self.engine.finish_exercise()
            return self.engine.snapshot()

    def start_rest(self, data: RestTimerStart) -> EngineSnapshot:
        with http_errors():
            return self.engine.start_rest(data.preset_seconds, data.duration_seconds)

    def skip_rest(self) -> EngineSnapshot:
        with http_errors():
            if not self.engine.skip_rest():
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No rest is running")
            return self.engine.snapshot()

    def reset_rest(self) -> EngineSnapshot:
        with http_errors():
            return self.engine.reset_rest()

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    async def record_set(self, exercise_id: str, data: SetCreate) -> ExerciseSetRead:
        with http_errors():
            return await self.engine.record_set(exercise_id, data)

    async def update_set(self, set_id: int, data: SetUpdate) -> ExerciseSetRead:
        with http_errors():
            return await self.engine.update_set(set_id, data)

    async def delete_set(self, set_id: int) -> None:
        with http_errors():
            await self.engine.delete_set(set_id)

    def exercise_view(self, exercise_id: str) -> ExerciseLedgerView:
        return self.engine.exercise_view(exercise_id)

    # ------------------------------------------------------------------
    # Selected routine
    # ------------------------------------------------------------------

    def selected_routine(self) -> SelectedRoutine:
        return SelectedRoutine(routine_id=self.engine.selected_routine())

    async def select_routine(self, data: SelectedRoutine) -> SelectedRoutine:
        with http_errors():
            if data.routine_id is None:
                self.engine.clear_selected_routine()
                return SelectedRoutine()
            return SelectedRoutine(routine_id=await self.engine.select_routine(data.routine_id))

    def clear_selected_routine(self) -> None:
        self.engine.clear_selected_routine()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def history(self, limit: Optional[int] = None) -> list[WorkoutSessionRead]:
        with http_errors():
            return await self.engine.history(limit)

    async def session_summary(self, session_id: int) -> SessionSummary:
        with http_errors():
            return await self.engine.session_summary(session_id)

    async def exercise_performance(self, exercise_id: str) -> ExercisePerformance:
        with http_errors():
            return await self.engine.exercise_performance(exercise_id)
