"""
Routine service.

Minimal routine content: creating, listing and deleting the routines a
workout is started against.
"""

from fastapi import HTTPException, status
from sqlmodel import Session

from app.db.repositories.routine import RoutineRepository
from app.engine.store import load_routine, save_routine
from app.schemas.routine import RoutineCreate, RoutineRead


class RoutineService:
    """Service for routine business logic."""

    def __init__(self, session: Session):
        self.repository = RoutineRepository(session)

    def create(self, user_id: int, data: RoutineCreate) -> RoutineRead:
        return save_routine(self.repository, user_id, data)

    def list_for_user(self, user_id: int) -> list[RoutineRead]:
        return [load_routine(self.repository, r.id) for r in self.repository.get_by_user(user_id)]

    def get_by_id(self, user_id: int, routine_id: int) -> RoutineRead:
        routine = load_routine(self.repository, routine_id)
        if routine is None or routine.user_id != user_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Routine not found")
        return routine

    def delete(self, user_id: int, routine_id: int) -> None:
        self.get_by_id(user_id, routine_id)
        self.repository.delete(routine_id)
