"""
Workout session database model.

One row per workout.  A session is *live* while its status is
``active`` or ``paused``; at most one live session may exist per user.
Elapsed time is never stored as a running counter: it is derived from
``started_at``, ``paused_seconds`` and ``paused_at``.
"""

import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.dates import timestamp_column, utcnow


class SessionStatus(str, Enum):
    """Persisted lifecycle status of a workout session."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_live(self) -> bool:
        return self in (SessionStatus.ACTIVE, SessionStatus.PAUSED)


LIVE_STATUSES = (SessionStatus.ACTIVE, SessionStatus.PAUSED)


class WorkoutSession(SQLModel, table=True):
    """A single workout executed against a routine."""

    __tablename__ = "workout_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)

    # Nullable only transiently: a live session without a routine is an orphan
    routine_id: Optional[int] = Field(default=None, foreign_key="routines.id", index=True)

    name: str = Field(nullable=False, max_length=200)
    status: SessionStatus = Field(default=SessionStatus.ACTIVE, nullable=False, index=True)

    started_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    paused_at: Optional[datetime.datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    completed_at: Optional[datetime.datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))

    # Sum of all closed pause intervals, in seconds
    paused_seconds: float = Field(default=0.0, nullable=False)

    # Computed once on completion / cancellation
    total_duration_seconds: int = Field(default=0, nullable=False)

    notes: Optional[str] = Field(default=None, max_length=1000)
    location: Optional[str] = Field(default=None, max_length=200)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime.datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
