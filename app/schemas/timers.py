"""
Timer schemas.

Views of the exercise and rest timers as exposed to the UI.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RestTimerState(str, Enum):
    """Rest countdown states: ``idle -> running -> (elapsed | skipped) -> idle``."""

    IDLE = "idle"
    RUNNING = "running"
    ELAPSED = "elapsed"
    SKIPPED = "skipped"


class RestTimerView(BaseModel):
    state: RestTimerState
    duration_seconds: int
    remaining_seconds: int
    is_suspended: bool
    preset_seconds: int


class ExerciseTimerView(BaseModel):
    exercise_id: Optional[str]
    elapsed_seconds: int
    is_running: bool
    time_exercising_seconds: int


class RestTimerStart(BaseModel):
    """Schema for starting the rest timer manually.

    Exactly one of ``preset_seconds`` or ``duration_seconds`` may be given;
    with neither, the currently selected preset is used.
    """

    preset_seconds: Optional[int] = Field(None, description="One of the configured presets")
    duration_seconds: Optional[int] = Field(None, gt=0, description="Custom duration")

    @model_validator(mode="after")
    def _one_source(self) -> "RestTimerStart":
        if self.preset_seconds is not None and self.duration_seconds is not None:
            raise ValueError("Give either preset_seconds or duration_seconds, not both")
        return self
