"""
Training endpoints.

The active workout of the current user: lifecycle, timers, sets, the
selected routine and history.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_training_service
from app.schemas.engine import EngineSnapshot, SessionSummary
from app.schemas.exercise_set import ExerciseLedgerView, ExercisePerformance, ExerciseSetRead, SetCreate, SetUpdate
from app.schemas.timers import RestTimerStart
from app.schemas.workout_session import (ExerciseSelect, SelectedRoutine, SessionComplete, SessionStart,
                                         WorkoutSessionRead, )
from app.services.training_service import TrainingService

router = APIRouter()


# ======================================================================
# Session lifecycle
# ======================================================================


@router.get("/session", summary="Get the current workout snapshot.", response_model=EngineSnapshot)
async def get_session(service: TrainingService = Depends(get_training_service)):
    return service.snapshot()


@router.post("/session", summary="Start a workout from a routine.", response_model=EngineSnapshot,
             status_code=status.HTTP_201_CREATED, )
async def start_session(data: SessionStart, service: TrainingService = Depends(get_training_service)):
    return await service.start(data)


@router.post("/session/pause", summary="Pause the workout.", response_model=EngineSnapshot)
async def pause_session(service: TrainingService = Depends(get_training_service)):
    return await service.pause()


@router.post("/session/resume", summary="Resume the workout.", response_model=EngineSnapshot)
async def resume_session(service: TrainingService = Depends(get_training_service)):
    return await service.resume()


@router.post("/session/complete", summary="Complete the workout.", response_model=WorkoutSessionRead)
async def complete_session(data: Optional[SessionComplete] = None,
                           service: TrainingService = Depends(get_training_service), ):
    return await service.complete(data or SessionComplete())


@router.post("/session/cancel", summary="Cancel the workout.", response_model=WorkoutSessionRead)
async def cancel_session(service: TrainingService = Depends(get_training_service)):
    return await service.cancel()


# ======================================================================
# Exercise and rest timers
# ======================================================================


@router.post("/session/exercise", summary="Select the current exercise.", response_model=EngineSnapshot)
async def select_exercise(data: ExerciseSelect, service: TrainingService = Depends(get_training_service)):
    return service.select_exercise(data.exercise_id)


@router.post("/session/exercise/finish", summary="Finish the current exercise.", response_model=EngineSnapshot)
async def finish_exercise(service: TrainingService = Depends(get_training_service)):
    return service.finish_exercise()


@router.post("/session/rest", summary="Start the rest timer.", response_model=EngineSnapshot)
async def start_rest(data: RestTimerStart, service: TrainingService = Depends(get_training_service)):
    return service.start_rest(data)


@router.post("/session/rest/skip", summary="Skip the running rest.", response_model=EngineSnapshot)
async def skip_rest(service: TrainingService = Depends(get_training_service)):
    return service.skip_rest()


@router.post("/session/rest/reset", summary="Reset the rest timer to idle.", response_model=EngineSnapshot)
async def reset_rest(service: TrainingService = Depends(get_training_service)):
    return service.reset_rest()


# ======================================================================
# Sets
# ======================================================================


@router.post("/session/sets", summary="Record a set.", response_model=ExerciseSetRead,
             status_code=status.HTTP_201_CREATED, )
async def record_set(data: SetCreate, exercise_id: str = Query(..., min_length=1, max_length=64),
                     service: TrainingService = Depends(get_training_service), ):
    return await service.record_set(exercise_id, data)


@router.patch("/session/sets/{set_id}", summary="Edit a recorded set.", response_model=ExerciseSetRead)
async def update_set(set_id: int, data: SetUpdate, service: TrainingService = Depends(get_training_service)):
    return await service.update_set(set_id, data)


@router.delete("/session/sets/{set_id}", summary="Delete a recorded set.", status_code=status.HTTP_204_NO_CONTENT)
async def delete_set(set_id: int, service: TrainingService = Depends(get_training_service)):
    await service.delete_set(set_id)


@router.get("/session/exercises/{exercise_id}", summary="Sets and aggregates of one exercise.",
            response_model=ExerciseLedgerView, )
async def get_exercise_ledger(exercise_id: str, service: TrainingService = Depends(get_training_service)):
    return service.exercise_view(exercise_id)


# ======================================================================
# Selected routine
# ======================================================================


@router.get("/selected-routine", summary="Get the routine selected for the next workout.",
            response_model=SelectedRoutine, )
async def get_selected_routine(service: TrainingService = Depends(get_training_service)):
    return service.selected_routine()


@router.put("/selected-routine", summary="Select a routine for the next workout.", response_model=SelectedRoutine)
async def put_selected_routine(data: SelectedRoutine, service: TrainingService = Depends(get_training_service)):
    return await service.select_routine(data)


@router.delete("/selected-routine", summary="Clear the selected routine.", status_code=status.HTTP_204_NO_CONTENT)
async def delete_selected_routine(service: TrainingService = Depends(get_training_service)):
    service.clear_selected_routine()


# ======================================================================
# History
# ======================================================================


@router.get("/history", summary="List finished workouts.", response_model=list[WorkoutSessionRead])
async def list_history(limit: Optional[int] = Query(None, ge=1, le=100),
                       service: TrainingService = Depends(get_training_service), ):
    return await service.history(limit)


@router.get("/history/{session_id}/summary", summary="Summary of a workout.", response_model=SessionSummary)
async def get_session_summary(session_id: int, service: TrainingService = Depends(get_training_service)):
    return await service.session_summary(session_id)


@router.get("/exercises/{exercise_id}/performance", summary="Last and best performance of an exercise.",
            response_model=ExercisePerformance, )
async def get_exercise_performance(exercise_id: str, service: TrainingService = Depends(get_training_service)):
    return await service.exercise_performance(exercise_id)
