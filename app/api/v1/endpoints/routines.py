"""
Routine endpoints.

Minimal routine content for starting workouts.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.api.dependencies import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.routine import RoutineCreate, RoutineRead
from app.services.routine_service import RoutineService

router = APIRouter()


@router.post("", summary="Create a routine.", response_model=RoutineRead, status_code=status.HTTP_201_CREATED)
def create_routine(data: RoutineCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return RoutineService(db).create(user.id, data)


@router.get("", summary="List the user's routines.", response_model=list[RoutineRead])
def list_routines(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return RoutineService(db).list_for_user(user.id)


@router.get("/{routine_id}", summary="Get a routine.", response_model=RoutineRead)
def get_routine(routine_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return RoutineService(db).get_by_id(user.id, routine_id)


@router.delete("/{routine_id}", summary="Delete a routine.", status_code=status.HTTP_204_NO_CONTENT)
def delete_routine(routine_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    RoutineService(db).delete(user.id, routine_id)
