"""
Workout engine errors.

Every failure the engine can report is a :class:`WorkoutError`.  None of
them is fatal: the engine degrades to "no active session" or "change not
saved" and leaves its in-memory state untouched.
"""

from typing import Optional


class WorkoutError(Exception):
    """Base class for all engine errors."""


class SetValidationError(WorkoutError):
    """Set data failed validation.

    ``fields`` maps every failing field to its message, not just the first.
    """

    def __init__(self, fields: dict[str, str]):
        self.fields = fields
        detail = "; ".join(f"{name}: {msg}" for name, msg in fields.items())
        super().__init__(f"Invalid set data ({detail})")


class InvalidRoutineError(WorkoutError):
    """The routine cannot be trained (it has no exercises)."""


class OrphanSessionError(WorkoutError):
    """A live session has no valid routine reference.

    Raised internally and repaired by the engine, never surfaced to users.
    """

    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Session {session_id} has no valid routine reference")


class PersistenceError(WorkoutError):
    """A remote store call failed or timed out.  Retrying is safe."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}" if message else f"{operation} failed")


class NotFoundError(WorkoutError):
    """A session, set or routine id does not resolve."""


class InvalidTransitionError(WorkoutError):
    """The requested operation is not valid in the current session state."""


class ActiveSessionExistsError(WorkoutError):
    """The user already has an active or paused session."""


class SessionBusyError(WorkoutError):
    """Another session-mutating operation is still in flight."""
