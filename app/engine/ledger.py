"""
Set ledger.

The in-memory log of the sets recorded in the active session, plus the
aggregates derived from it.  The ledger itself never talks to the
store: the state machine persists first and then applies the confirmed
record here, so the ledger always mirrors what the store holds.

Aggregates
----------

* **Volume** is ``sum(weight_kg * reps_completed)``; bodyweight sets
  (no weight) contribute nothing.
* **Best set** is the set with the highest weight, ties broken by more
  reps, then by the earlier set.
* **Labels**: warm-ups are numbered ``W1, W2 ...`` on their own; every
  other set takes the next working ordinal, with a ``D`` (dropset) or
  ``F`` (failure) suffix.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from app.core.errors import NotFoundError, SetValidationError
from app.engine.timers import format_duration
from app.models.exercise_set import SetType
from app.schemas.engine import SessionSummary
from app.schemas.exercise_set import (ExerciseLedgerView, ExercisePerformance, ExerciseSetRead, LabelledSet,
                                      PerformanceRecord, SetCreate, SetUpdate, )
from app.schemas.workout_session import WorkoutSessionRead

_SUFFIXES = { SetType.DROPSET: "D", SetType.FAILURE: "F" }


# ======================================================================
# Validation
# ======================================================================


def _field_errors(error: ValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for item in error.errors():
        name = ".".join(str(part) for part in item["loc"]) or "__root__"
        fields.setdefault(name, item["msg"])
    return fields


def _validate(schema: type[BaseModel], data: Union[BaseModel, Mapping[str, Any]]) -> Any:
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise SetValidationError(_field_errors(e)) from e


def validate_set_data(data: Union[SetCreate, Mapping[str, Any]]) -> SetCreate:
    """Validate new set data, reporting every failing field at once."""
    return _validate(SetCreate, data)


def validate_set_update(data: Union[SetUpdate, Mapping[str, Any]]) -> SetUpdate:
    """Validate a partial set update.  Explicit ``None`` for reps is rejected."""
    update = _validate(SetUpdate, data)
    if "reps_completed" in update.model_fields_set and update.reps_completed is None:
        raise SetValidationError({ "reps_completed": "Reps cannot be removed from a set" })
    return update


# ======================================================================
# Aggregates
# ======================================================================


def calculate_volume(sets: Iterable[ExerciseSetRead]) -> float:
    return sum(s.volume_kg for s in sets)


def find_best_set(sets: Sequence[ExerciseSetRead]) -> Optional[ExerciseSetRead]:
    """Heaviest set, ties broken by reps.  ``max`` keeps the first of equals."""
    if not sets:
        return None
    return max(sets, key=lambda s: (s.weight_kg or 0.0, s.reps_completed))


def set_label(set_type: SetType, warmup_ordinal: int, working_ordinal: int) -> str:
    if set_type == SetType.WARMUP:
        return f"W{warmup_ordinal}"
    return f"{working_ordinal}{_SUFFIXES.get(set_type, '')}"


def label_sets(sets: Sequence[ExerciseSetRead]) -> list[LabelledSet]:
    """Display labels for the sets of one exercise, in recording order."""
    labelled: list[LabelledSet] = []
    warmups = working = 0
    for s in sets:
        if s.set_type == SetType.WARMUP:
            warmups += 1
        else:
            working += 1
        labelled.append(LabelledSet(**s.model_dump(), label=set_label(s.set_type, warmups, working)))
    return labelled


def build_view(exercise_id: str, sets: Sequence[ExerciseSetRead]) -> ExerciseLedgerView:
    labelled = label_sets(sets)
    warmups = sum(1 for s in sets if s.set_type == SetType.WARMUP)
    return ExerciseLedgerView(exercise_id=exercise_id, sets=labelled, working_sets=len(sets) - warmups,
                              warmup_sets=warmups, volume_kg=calculate_volume(sets), best_set=find_best_set(sets), )


def group_by_exercise(sets: Iterable[ExerciseSetRead]) -> dict[str, list[ExerciseSetRead]]:
    """Sets grouped per exercise, in order of first appearance."""
    groups: dict[str, list[ExerciseSetRead]] = {}
    for s in sets:
        groups.setdefault(s.exercise_id, []).append(s)
    return groups


def summarize_session(session: WorkoutSessionRead, sets: Sequence[ExerciseSetRead],
                      duration_seconds: Optional[float] = None, ) -> SessionSummary:
    """Per-exercise summary of a session.

    ``duration_seconds`` defaults to the stored total, which is only
    meaningful once the session has ended.
    """
    groups = group_by_exercise(sets)
    duration = session.total_duration_seconds if duration_seconds is None else duration_seconds
    return SessionSummary(session=session, total_exercises=len(groups), total_sets=len(sets),
                          total_volume_kg=calculate_volume(sets), duration_formatted=format_duration(duration),
                          exercises=[build_view(exercise_id, group) for exercise_id, group in groups.items()], )


# ======================================================================
# Performance history
# ======================================================================


def _record(s: ExerciseSetRead) -> PerformanceRecord:
    return PerformanceRecord(weight_kg=s.weight_kg, reps_completed=s.reps_completed, completed_at=s.completed_at)


def last_and_best(exercise_id: str, history: Sequence[ExerciseSetRead]) -> ExercisePerformance:
    """Last and best ``normal`` performance from a newest-first history.

    Only weighted sets compete for best.
    """
    normal = [s for s in history if s.set_type == SetType.NORMAL]
    weighted = [s for s in normal if s.weight_kg is not None]
    last = max(normal, key=lambda s: s.completed_at) if normal else None
    best = find_best_set(sorted(weighted, key=lambda s: s.completed_at))
    return ExercisePerformance(exercise_id=exercise_id, last=_record(last) if last else None,
                               best=_record(best) if best else None, )


def is_personal_record(weight_kg: float, reps_completed: int, best: Optional[PerformanceRecord]) -> bool:
    """Heavier than the best, or as heavy with more reps.  No history counts as a record."""
    if best is None:
        return True
    best_weight = best.weight_kg or 0.0
    return weight_kg > best_weight or (weight_kg == best_weight and reps_completed > best.reps_completed)


# ======================================================================
# Ledger
# ======================================================================


class SetLedger:
    """Sets of the active session.  Replaced wholesale on every change."""

    def __init__(self):
        self._sets: tuple[ExerciseSetRead, ...] = ()

    def __len__(self) -> int:
        return len(self._sets)

    @property
    def sets(self) -> tuple[ExerciseSetRead, ...]:
        return self._sets

    def load(self, sets: Iterable[ExerciseSetRead]) -> None:
        self._sets = tuple(sets)

    def clear(self) -> None:
        self._sets = ()

    def get(self, set_id: int) -> ExerciseSetRead:
        for s in self._sets:
            if s.id == set_id:
                return s
        raise NotFoundError(f"Set {set_id} is not part of the active session")

    def next_set_number(self, exercise_id: str) -> int:
        return sum(1 for s in self._sets if s.exercise_id == exercise_id) + 1

    def add(self, entry: ExerciseSetRead) -> None:
        self._sets = self._sets + (entry,)

    def replace(self, entry: ExerciseSetRead) -> None:
        self.get(entry.id)
        self._sets = tuple(entry if s.id == entry.id else s for s in self._sets)

    def remove(self, set_id: int) -> ExerciseSetRead:
        removed = self.get(set_id)
        self._sets = tuple(s for s in self._sets if s.id != set_id)
        return removed

    def sets_for(self, exercise_id: str) -> list[ExerciseSetRead]:
        return [s for s in self._sets if s.exercise_id == exercise_id]

    def view(self, exercise_id: str) -> ExerciseLedgerView:
        return build_view(exercise_id, self.sets_for(exercise_id))

    def views(self) -> list[ExerciseLedgerView]:
        return [build_view(exercise_id, group) for exercise_id, group in group_by_exercise(self._sets).items()]

    @property
    def total_volume_kg(self) -> float:
        return calculate_volume(self._sets)
