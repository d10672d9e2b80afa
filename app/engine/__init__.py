"""
Workout session engine.

Lifecycle, timers, set ledger and recovery of a user's in-progress
workout.
"""

from app.engine.cache import (InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore,
                              SelectedRoutineCache, )
from app.engine.clock import Clock, ManualClock, SystemClock, Ticker
from app.engine.config import EngineConfig
from app.engine.events import SnapshotBus
from app.engine.recovery import RecoveryOutcome, RecoveryResult, RecoveryService
from app.engine.registry import EngineRegistry
from app.engine.state_machine import SessionStateMachine
from app.engine.store import RemoteStore, SqlModelRemoteStore
from app.engine.workout import WorkoutEngine

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
    "Ticker",
    "EngineConfig",
    "SnapshotBus",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SelectedRoutineCache",
    "RemoteStore",
    "SqlModelRemoteStore",
    "SessionStateMachine",
    "RecoveryOutcome",
    "RecoveryResult",
    "RecoveryService",
    "WorkoutEngine",
    "EngineRegistry",
]
