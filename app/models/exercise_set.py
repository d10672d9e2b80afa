"""
Exercise set database model.

A set is one recorded performance event (weight x reps) for one exercise
within a session.  Sets are owned by their session.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.dates import timestamp_column, utcnow


class SetType(str, Enum):
    """Kind of set.  Warm-ups do not count as working sets."""

    NORMAL = "normal"
    WARMUP = "warmup"
    DROPSET = "dropset"
    FAILURE = "failure"


class ExerciseSet(SQLModel, table=True):
    """A recorded set."""

    __tablename__ = "exercise_sets"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="workout_sessions.id", nullable=False, index=True)
    exercise_id: str = Field(nullable=False, max_length=64, index=True)

    # Position within the exercise for this session (1-based)
    set_number: int = Field(nullable=False)
    set_type: SetType = Field(default=SetType.NORMAL, nullable=False)

    weight_kg: Optional[float] = Field(default=None)
    reps_completed: int = Field(nullable=False)
    rpe_score: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=500)

    # Rest actually taken before this set
    rest_duration_seconds: Optional[int] = Field(default=None)

    completed_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
