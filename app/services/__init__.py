"""Business logic services."""

from app.services.user_service import UserService
from app.services.routine_service import RoutineService
from app.services.training_service import TrainingService

__all__ = [
    "UserService",
    "RoutineService",
    "TrainingService",
]
