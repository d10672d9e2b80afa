"""
Routine repository.

Handles database operations for :class:`Routine` and its ordered
:class:`RoutineExercise` rows.
"""

from typing import Optional

from sqlmodel import Session, select

from app.models.routine import Routine, RoutineExercise


class RoutineRepository:
    """Repository for Routine database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, routine: Routine, exercises: list[RoutineExercise]) -> Routine:
        self.session.add(routine)
        self.session.flush()
        for position, exercise in enumerate(exercises, start=1):
            exercise.routine_id = routine.id
            exercise.position = position
            self.session.add(exercise)
        self.session.commit()
        self.session.refresh(routine)
        return routine

    def get_by_id(self, routine_id: int) -> Optional[Routine]:
        return self.session.get(Routine, routine_id)

    def get_by_user(self, user_id: int) -> list[Routine]:
        statement = select(Routine).where(Routine.user_id == user_id).order_by(Routine.name, Routine.id)
        return list(self.session.exec(statement).all())

    def get_exercises(self, routine_id: int) -> list[RoutineExercise]:
        statement = (select(RoutineExercise).where(RoutineExercise.routine_id == routine_id)
                     .order_by(RoutineExercise.position))
        return list(self.session.exec(statement).all())

    def delete(self, routine_id: int) -> bool:
        routine = self.get_by_id(routine_id)
        if routine:
            for exercise in self.get_exercises(routine_id):
                self.session.delete(exercise)
            self.session.delete(routine)
            self.session.commit()
            return True
        return False
