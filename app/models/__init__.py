"""SQLModel database models."""

from app.models.user import User
from app.models.routine import Routine, RoutineExercise
from app.models.workout_session import SessionStatus, WorkoutSession
from app.models.exercise_set import ExerciseSet, SetType

__all__ = [
    "User",
    "Routine",
    "RoutineExercise",
    "SessionStatus",
    "WorkoutSession",
    "ExerciseSet",
    "SetType",
]
