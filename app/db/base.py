"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from app.models.user import User  # noqa: F401
from app.models.routine import Routine, RoutineExercise  # noqa: F401
from app.models.workout_session import WorkoutSession  # noqa: F401
from app.models.exercise_set import ExerciseSet  # noqa: F401
