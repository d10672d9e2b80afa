"""
Workout session repository.

Handles database operations for :class:`WorkoutSession`.
"""

from typing import Optional

from sqlmodel import Session, select

from app.models.workout_session import LIVE_STATUSES, SessionStatus, WorkoutSession


class WorkoutSessionRepository:
    """Repository for WorkoutSession database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: WorkoutSession) -> WorkoutSession:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[WorkoutSession]:
        return self.session.get(WorkoutSession, entry_id)

    def get_live_by_user(self, user_id: int) -> list[WorkoutSession]:
        """Active and paused sessions of a user, newest first."""
        statement = (select(WorkoutSession).where(WorkoutSession.user_id == user_id,
                                                  WorkoutSession.status.in_(LIVE_STATUSES), )
                     .order_by(WorkoutSession.started_at.desc(), WorkoutSession.id.desc()))
        return list(self.session.exec(statement).all())

    def get_history_by_user(self, user_id: int, limit: int = 20) -> list[WorkoutSession]:
        """Completed and cancelled sessions of a user, newest first."""
        statement = (select(WorkoutSession).where(WorkoutSession.user_id == user_id,
                                                  WorkoutSession.status.in_((SessionStatus.COMPLETED,
                                                                             SessionStatus.CANCELLED)), )
                     .order_by(WorkoutSession.started_at.desc(), WorkoutSession.id.desc()).limit(limit))
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, entry: WorkoutSession) -> WorkoutSession:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry
