"""
Routine schemas.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RoutineExerciseCreate(BaseModel):
    """Schema for one exercise slot of a new routine."""

    exercise_id: str = Field(..., min_length=1, max_length=64)
    target_sets: int = Field(3, ge=1, le=20)
    target_reps: Optional[int] = Field(None, ge=1, le=100)


class RoutineCreate(BaseModel):
    """Schema for creating a routine."""

    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=1000)
    exercises: list[RoutineExerciseCreate] = Field(default_factory=list)


class RoutineExerciseRead(BaseModel):
    exercise_id: str
    position: int
    target_sets: int
    target_reps: Optional[int] = None

    class Config:
        from_attributes = True


class RoutineRead(BaseModel):
    """A routine with its ordered exercises."""

    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    exercises: list[RoutineExerciseRead] = Field(default_factory=list)
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)
