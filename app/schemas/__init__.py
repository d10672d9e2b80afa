"""Pydantic schemas for request/response validation."""

from app.schemas.user import UserCreate, UserResponse
from app.schemas.routine import RoutineCreate, RoutineExerciseCreate, RoutineExerciseRead, RoutineRead
from app.schemas.workout_session import (
    WorkoutSessionRead,
    WorkoutSessionCreate,
    WorkoutSessionUpdate,
    SessionStart,
    SessionComplete,
    ExerciseSelect,
    SelectedRoutine,
)
from app.schemas.exercise_set import (
    SetCreate,
    SetUpdate,
    SetRecord,
    ExerciseSetRead,
    LabelledSet,
    ExerciseLedgerView,
    PerformanceRecord,
    ExercisePerformance,
)
from app.schemas.timers import RestTimerState, RestTimerView, ExerciseTimerView, RestTimerStart
from app.schemas.engine import EngineStatus, EngineSnapshot, SessionSummary

__all__ = [
    "UserCreate",
    "UserResponse",
    "RoutineCreate",
    "RoutineExerciseCreate",
    "RoutineExerciseRead",
    "RoutineRead",
    "WorkoutSessionRead",
    "WorkoutSessionCreate",
    "WorkoutSessionUpdate",
    "SessionStart",
    "SessionComplete",
    "ExerciseSelect",
    "SelectedRoutine",
    "SetCreate",
    "SetUpdate",
    "SetRecord",
    "ExerciseSetRead",
    "LabelledSet",
    "ExerciseLedgerView",
    "PerformanceRecord",
    "ExercisePerformance",
    "RestTimerState",
    "RestTimerView",
    "ExerciseTimerView",
    "RestTimerStart",
    "EngineStatus",
    "EngineSnapshot",
    "SessionSummary",
]
