"""
Shared API dependencies.

Reusable FastAPI dependencies for the current user, database access and
the user's workout engine.
"""

from fastapi import Depends, Header, HTTPException, Request, status
from sqlmodel import Session

from app.db.session import get_db
from app.engine.registry import EngineRegistry
from app.engine.workout import WorkoutEngine
from app.models.user import User
from app.services.training_service import TrainingService
from app.services.user_service import UserService


def get_current_user(x_user_id: int = Header(..., description="Authenticated user id"),
                     db: Session = Depends(get_db), ) -> User:
    """Resolve the user the upstream gateway authenticated."""
    user = UserService(db).get_user_by_id(x_user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def get_engine_registry(request: Request) -> EngineRegistry:
    return request.app.state.engines


async def get_workout_engine(user: User = Depends(get_current_user),
                             registry: EngineRegistry = Depends(get_engine_registry), ) -> WorkoutEngine:
    """The user's engine, recovered from the store on first access."""
    return await registry.get(user.id)


def get_training_service(engine: WorkoutEngine = Depends(get_workout_engine)) -> TrainingService:
    return TrainingService(engine)
