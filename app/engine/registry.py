"""
Engine registry.

Holds one :class:`WorkoutEngine` per user for the lifetime of the
process.  An engine is built and recovered on first access, so the
recovery layer always runs before the user's timers start.
"""

import asyncio
import logging
from typing import Callable

from app.engine.workout import WorkoutEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[int], WorkoutEngine]


class EngineRegistry:
    """Per-user engines, created lazily."""

    def __init__(self, factory: EngineFactory):
        self._factory = factory
        self._engines: dict[int, WorkoutEngine] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._engines

    def __len__(self) -> int:
        return len(self._engines)

    async def get(self, user_id: int) -> WorkoutEngine:
        engine = self._engines.get(user_id)
        if engine is not None:
            return engine
        async with self._lock:
            engine = self._engines.get(user_id)
            if engine is None:
                engine = self._factory(user_id)
                result = await engine.load()
                logger.info("Loaded workout engine for user %s (%s)", user_id, result.outcome.value)
                self._engines[user_id] = engine
            return engine

    def discard(self, user_id: int) -> None:
        engine = self._engines.pop(user_id, None)
        if engine is not None:
            engine.close()

    def close(self) -> None:
        for engine in self._engines.values():
            engine.close()
        self._engines.clear()
