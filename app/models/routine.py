"""
Routine database models.

A routine is a named, ordered list of exercises.  Routine editing lives
outside the workout engine; sessions only need to resolve a routine and
check that it has at least one exercise.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.dates import timestamp_column, utcnow


class Routine(SQLModel, table=True):
    """A user's training routine."""

    __tablename__ = "routines"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1000)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class RoutineExercise(SQLModel, table=True):
    """One exercise slot of a routine, ordered by ``position``."""

    __tablename__ = "routine_exercises"

    id: Optional[int] = Field(default=None, primary_key=True)
    routine_id: int = Field(foreign_key="routines.id", nullable=False, index=True)
    exercise_id: str = Field(nullable=False, max_length=64)
    position: int = Field(default=1, nullable=False)
    target_sets: int = Field(default=3, nullable=False)
    target_reps: Optional[int] = Field(default=None)
