"""
Engine configuration.

Everything tunable about the engine lives in :class:`EngineConfig` so a
different config can be injected in tests; :meth:`EngineConfig.from_settings`
builds the production one from the application settings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from app.core.config import Settings, settings


class EngineConfig(BaseModel):
    """Configuration for a :class:`~app.engine.workout.WorkoutEngine`."""

    tick_seconds: float = Field(1.0, gt=0.0, description="Interval between UI ticks")
    remote_timeout_seconds: float = Field(10.0, gt=0.0, description="Timeout applied to every remote call")
    rest_presets: list[int] = Field(default_factory=lambda: [30, 60, 90, 120, 180, 300])
    default_rest_seconds: int = Field(90, gt=0)
    max_rest_seconds: int = Field(3600, gt=0)
    history_limit: int = Field(10, ge=1)

    @model_validator(mode="after")
    def _default_is_a_preset(self) -> EngineConfig:
        if self.default_rest_seconds not in self.rest_presets:
            raise ValueError(f"default_rest_seconds={self.default_rest_seconds} "
                             f"is not one of the rest presets {self.rest_presets}")
        if any(p <= 0 or p > self.max_rest_seconds for p in self.rest_presets):
            raise ValueError(f"Rest presets must be between 1 and {self.max_rest_seconds} seconds")
        return self

    @classmethod
    def from_settings(cls, source: Settings = settings) -> EngineConfig:
        return cls(tick_seconds=source.TICK_SECONDS, remote_timeout_seconds=source.REMOTE_TIMEOUT_SECONDS,
                   rest_presets=list(source.REST_PRESETS), default_rest_seconds=source.DEFAULT_REST_SECONDS,
                   max_rest_seconds=source.MAX_REST_SECONDS, history_limit=source.HISTORY_LIMIT, )
