"""
Exercise set repository.

Handles database operations for :class:`ExerciseSet`, including the
cross-session history queries used for last/best performance.
"""

from typing import Optional

from sqlmodel import Session, select

from app.models.exercise_set import ExerciseSet, SetType
from app.models.workout_session import WorkoutSession


class ExerciseSetRepository:
    """Repository for ExerciseSet database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: ExerciseSet) -> ExerciseSet:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[ExerciseSet]:
        return self.session.get(ExerciseSet, entry_id)

    def get_by_session(self, session_id: int) -> list[ExerciseSet]:
        statement = (select(ExerciseSet).where(ExerciseSet.session_id == session_id)
                     .order_by(ExerciseSet.completed_at, ExerciseSet.id))
        return list(self.session.exec(statement).all())

    def get_user_history(self, user_id: int, exercise_id: str, set_type: Optional[SetType] = None,
                         limit: int = 50, ) -> list[ExerciseSet]:
        """Sets of one exercise across all of a user's sessions, newest first."""
        statement = (select(ExerciseSet).join(WorkoutSession, WorkoutSession.id == ExerciseSet.session_id)
                     .where(WorkoutSession.user_id == user_id, ExerciseSet.exercise_id == exercise_id, ))
        if set_type is not None:
            statement = statement.where(ExerciseSet.set_type == set_type)
        statement = statement.order_by(ExerciseSet.completed_at.desc(), ExerciseSet.id.desc()).limit(limit)
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, entry: ExerciseSet) -> ExerciseSet:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def delete(self, entry_id: int) -> bool:
        entry = self.get_by_id(entry_id)
        if entry:
            self.session.delete(entry)
            self.session.commit()
            return True
        return False
