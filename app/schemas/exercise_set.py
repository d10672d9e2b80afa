"""
Exercise set schemas.

``SetCreate``/``SetUpdate`` carry the field rules of the set ledger
(weight >= 0, reps > 0, RPE 1-10).  Validation happens before any
remote call.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.exercise_set import SetType


class SetCreate(BaseModel):
    """Schema for recording a set."""

    set_type: SetType = SetType.NORMAL
    weight_kg: Optional[float] = Field(None, ge=0, description="Load in kg, omitted for bodyweight")
    reps_completed: int = Field(..., gt=0)
    rpe_score: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = Field(None, max_length=500)


class SetUpdate(BaseModel):
    """Schema for editing a recorded set."""

    set_type: Optional[SetType] = None
    weight_kg: Optional[float] = Field(None, ge=0)
    reps_completed: Optional[int] = Field(None, gt=0)
    rpe_score: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = Field(None, max_length=500)


class SetRecord(BaseModel):
    """Payload the engine sends to the store to persist a new set."""

    session_id: int
    exercise_id: str
    set_number: int = Field(..., ge=1)
    set_type: SetType
    weight_kg: Optional[float] = None
    reps_completed: int
    rpe_score: Optional[int] = None
    notes: Optional[str] = None
    rest_duration_seconds: Optional[int] = None
    completed_at: datetime.datetime


class ExerciseSetRead(BaseModel):
    """A recorded set as returned by the remote store."""

    id: int
    session_id: int
    exercise_id: str
    set_number: int
    set_type: SetType
    weight_kg: Optional[float] = None
    reps_completed: int
    rpe_score: Optional[int] = None
    notes: Optional[str] = None
    rest_duration_seconds: Optional[int] = None
    completed_at: datetime.datetime

    class Config:
        from_attributes = True
        frozen = True

    @property
    def volume_kg(self) -> float:
        return (self.weight_kg or 0.0) * self.reps_completed


class LabelledSet(ExerciseSetRead):
    """A set with its display label (``1``, ``2D``, ``W1`` ...)."""

    label: str


class ExerciseLedgerView(BaseModel):
    """Ledger aggregates for one exercise of the active session."""

    exercise_id: str
    sets: list[LabelledSet]
    working_sets: int
    warmup_sets: int
    volume_kg: float
    best_set: Optional[ExerciseSetRead]


class PerformanceRecord(BaseModel):
    """A single historical performance of an exercise."""

    weight_kg: Optional[float]
    reps_completed: int
    completed_at: datetime.datetime


class ExercisePerformance(BaseModel):
    """Last and best historical ``normal`` performance of an exercise."""

    exercise_id: str
    last: Optional[PerformanceRecord]
    best: Optional[PerformanceRecord]

    @property
    def has_history(self) -> bool:
        return self.last is not None or self.best is not None
