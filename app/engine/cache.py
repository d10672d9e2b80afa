"""
Client-side key/value cache.

Holds small pieces of state that must survive a reload but are not part
of the remote record, namely the routine a user selected before
starting a workout.  Values are validated on read: an entry that no
longer parses is dropped instead of being handed to the engine.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from app.schemas.workout_session import SelectedRoutine

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Minimal persistent key/value interface (JSON-compatible values)."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used in tests."""

    def __init__(self):
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """Store backed by a single JSON file.

    The file is rewritten atomically on every change.  A missing or
    unreadable file starts the store empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._data = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Cache file %s is unreadable, starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Cache file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()


class SelectedRoutineCache:
    """The routine a user picked for their next workout, keyed per user."""

    KEY_PREFIX = "selected_routine"

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _key(self, user_id: int) -> str:
        return f"{self.KEY_PREFIX}:{user_id}"

    def get(self, user_id: int) -> Optional[int]:
        raw = self.store.get(self._key(user_id))
        if raw is None:
            return None
        try:
            value = SelectedRoutine.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed selected-routine entry for user %s: %r", user_id, raw)
            self.store.delete(self._key(user_id))
            return None
        return value.routine_id

    def set(self, user_id: int, routine_id: Optional[int]) -> None:
        if routine_id is None:
            self.clear(user_id)
            return
        self.store.set(self._key(user_id), SelectedRoutine(routine_id=routine_id).model_dump())

    def clear(self, user_id: int) -> None:
        self.store.delete(self._key(user_id))
