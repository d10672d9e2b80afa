"""Database repositories."""

from app.db.repositories.user import UserRepository
from app.db.repositories.routine import RoutineRepository
from app.db.repositories.workout_session import WorkoutSessionRepository
from app.db.repositories.exercise_set import ExerciseSetRepository

__all__ = [
    "UserRepository",
    "RoutineRepository",
    "WorkoutSessionRepository",
    "ExerciseSetRepository",
]
