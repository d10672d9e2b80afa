"""
Workout session schemas.

``WorkoutSessionRead`` is the detached, immutable record the engine holds
as its active session; the remaining schemas are API inputs and store
update payloads.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.workout_session import SessionStatus


class WorkoutSessionRead(BaseModel):
    """A workout session as returned by the remote store."""

    id: int
    user_id: int
    routine_id: Optional[int]
    name: str
    status: SessionStatus
    started_at: datetime.datetime
    paused_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None
    paused_seconds: float = 0.0
    total_duration_seconds: int = 0
    notes: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True
        frozen = True

    @property
    def is_live(self) -> bool:
        return self.status.is_live


class WorkoutSessionCreate(BaseModel):
    """Payload the engine sends to the store to create a session."""

    user_id: int
    routine_id: int
    name: str = Field(..., max_length=200)
    started_at: datetime.datetime
    notes: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=200)


class WorkoutSessionUpdate(BaseModel):
    """Partial session update.  Only explicitly set fields are written."""

    status: Optional[SessionStatus] = None
    paused_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None
    paused_seconds: Optional[float] = Field(None, ge=0.0)
    total_duration_seconds: Optional[int] = Field(None, ge=0)


class SessionStart(BaseModel):
    """Schema for starting a workout against a routine."""

    routine_id: int = Field(..., description="Routine to execute")
    name: Optional[str] = Field(None, max_length=200, description="Overrides '<routine> - <date>'")
    notes: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=200)


class SessionComplete(BaseModel):
    """Schema for completing a workout."""

    duration_seconds: Optional[int] = Field(
        None, ge=0, description="Explicit duration; defaults to the accumulated active time"
    )


class ExerciseSelect(BaseModel):
    """Schema for selecting the exercise currently being performed."""

    exercise_id: str = Field(..., min_length=1, max_length=64)


class SelectedRoutine(BaseModel):
    """Schema for the user's last selected (not yet started) routine."""

    routine_id: Optional[int] = None
