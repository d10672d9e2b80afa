"""
Engine snapshot schemas.

An :class:`EngineSnapshot` is published on every transition and every
timer tick.  It is built in one step from the current active-session
value so consumers never see a partially updated state.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from app.schemas.exercise_set import ExerciseLedgerView
from app.schemas.timers import ExerciseTimerView, RestTimerView
from app.schemas.workout_session import WorkoutSessionRead


class EngineStatus(str, Enum):
    """State of the engine as seen by consumers."""

    NONE = "none"
    ACTIVE = "active"
    PAUSED = "paused"


class EngineSnapshot(BaseModel):
    """Everything the UI reads about the current workout."""

    event: str
    status: EngineStatus
    session: Optional[WorkoutSessionRead]
    is_active: bool
    is_paused: bool
    elapsed_seconds: int
    elapsed_formatted: str
    exercise_timer: ExerciseTimerView
    rest_timer: RestTimerView


class SessionSummary(BaseModel):
    """Summary of a (usually finished) session."""

    session: WorkoutSessionRead
    total_exercises: int
    total_sets: int
    total_volume_kg: float
    duration_formatted: str
    exercises: list[ExerciseLedgerView]

