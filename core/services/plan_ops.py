"""Applies typed mutation operations to a plan snapshot.

Operations address workouts by absolute date, so a move can cross week
boundaries. A missing target never raises: it becomes a warning and the
remaining operations still run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Optional, Sequence

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from core.schemas import TrainingWeek, TrainingWorkout, WorkoutTag
from core.services.json_diff import compare
from core.services.plan_operations import (
    AddAnnotation,
    AdjustIntensity,
    AdjustWeekVolume,
    AdjustWorkoutIntensity,
    DeleteWorkout,
    ExplainWorkout,
    InsertWorkout,
    ModifyWorkout,
    ModifyWorkoutBasedOnFeedback,
    MoveWorkout,
    PlanOperation,
    ReplaceWorkout,
    SetPlanProperty,
    ShiftWeek,
    SwapWorkouts,
)
from core.services.planning import weekday_name
from core.services.week_builder import recompute_week_aggregates

logger = logging.getLogger(__name__)

INTENSITY_FACTORS = {"easier": 0.7, "harder": 1.1, "moderate": 0.85}

_LADDER = (WorkoutTag.LT1, WorkoutTag.LT2, WorkoutTag.VO2_MAX)
_STEP_DOWN_TO_LT2 = {WorkoutTag.HILLS, WorkoutTag.SPEED, WorkoutTag.RACE_SPECIFIC}

# ModifyWorkout values arrive with either attribute or camelCase wire names
_WORKOUT_FIELDS = {
    **{to_camel(name): name for name in TrainingWorkout.model_fields},
    **{name: name for name in TrainingWorkout.model_fields},
}


@dataclass
class PlanOpsResult:
    updated_plan: list[TrainingWeek]
    updated_weeks: list[TrainingWeek]
    changeset: list[dict]
    warnings: list[str]


@dataclass
class _Outcome:
    changed: set[int] = field(default_factory=set)
    warning: Optional[str] = None


def _missing(day: date) -> _Outcome:
    return _Outcome(warning=f"No workout found on {day.isoformat()}")


def _find(plan: list[TrainingWeek], day: date) -> Optional[tuple[TrainingWeek, int]]:
    for week in plan:
        for idx, workout in enumerate(week.workouts):
            if workout.date == day:
                return week, idx
    return None


def _week_containing(plan: list[TrainingWeek], day: date) -> Optional[TrainingWeek]:
    return next((w for w in plan if w.contains(day)), None)


def _week_numbered(plan: list[TrainingWeek], number: int) -> Optional[TrainingWeek]:
    return next((w for w in plan if w.week == number), None)


def _append_note(workout: TrainingWorkout, note: str) -> None:
    workout.notes = f"{workout.notes}\n{note}" if workout.notes else note


def _scale(workout: TrainingWorkout, factor: float) -> None:
    workout.distance = round(workout.distance * factor, 1)
    workout.duration = round(workout.duration * factor)


def adjust_workout_intensity(workout: TrainingWorkout, adjustment: str, reason: str = "") -> None:
    """Make a single workout easier, harder, moderate, or a rest day, in place."""
    if adjustment == "skip":
        workout.distance = 0
        workout.duration = 0
        workout.tags = WorkoutTag.EASY
        workout.name = "Rest Day"
    else:
        _scale(workout, INTENSITY_FACTORS[adjustment])
        if adjustment == "easier":
            workout.tags = WorkoutTag.EASY
        elif adjustment == "harder" and workout.tags == WorkoutTag.EASY:
            workout.tags = WorkoutTag.LT1
    note = f"Adjusted: {adjustment}"
    if reason:
        note += f" ({reason})"
    _append_note(workout, note)


def _shift_tag(tag: WorkoutTag, direction: str) -> WorkoutTag:
    if tag in _LADDER:
        idx = _LADDER.index(tag) + (1 if direction == "up" else -1)
        return _LADDER[min(max(idx, 0), len(_LADDER) - 1)]
    if tag in _STEP_DOWN_TO_LT2 and direction == "down":
        return WorkoutTag.LT2
    return tag


def _move(plan: list[TrainingWeek], op: MoveWorkout) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    target = _week_containing(plan, op.to_date)
    if target is None:
        return _Outcome(warning=f"No week contains {op.to_date.isoformat()}")
    week, idx = found
    workout = week.workouts.pop(idx)
    workout.date = op.to_date
    workout.day_of_week = weekday_name(op.to_date)
    target.workouts.append(workout)
    return _Outcome({week.week, target.week})


def _replace(plan: list[TrainingWeek], op: ReplaceWorkout) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    week, idx = found
    week.workouts[idx] = op.workout.model_copy(deep=True)
    return _Outcome({week.week})


def _modify(plan: list[TrainingWeek], op: ModifyWorkout) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    week, idx = found
    values = {}
    unknown = []
    for key, value in op.new_values.items():
        name = _WORKOUT_FIELDS.get(key)
        if name is None:
            unknown.append(key)
        else:
            values[name] = value
    if unknown:
        return _Outcome(
            warning=f"Unknown workout fields on {op.date.isoformat()}: {', '.join(sorted(unknown))}"
        )
    merged = {**week.workouts[idx].model_dump(), **values}
    try:
        week.workouts[idx] = TrainingWorkout.model_validate(merged)
    except ValidationError as exc:
        return _Outcome(warning=f"Invalid values for workout on {op.date.isoformat()}: {exc.error_count()} error(s)")
    return _Outcome({week.week})


def _insert(plan: list[TrainingWeek], op: InsertWorkout) -> _Outcome:
    week = _week_containing(plan, op.date)
    if week is None:
        return _Outcome(warning=f"No week contains {op.date.isoformat()}")
    workout = op.workout.model_copy(update={"date": op.date, "day_of_week": weekday_name(op.date)}, deep=True)
    week.workouts.append(workout)
    return _Outcome({week.week})


def _delete(plan: list[TrainingWeek], op: DeleteWorkout) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    week, idx = found
    del week.workouts[idx]
    return _Outcome({week.week})


def _swap(plan: list[TrainingWeek], op: SwapWorkouts) -> _Outcome:
    first = _find(plan, op.date)
    if first is None:
        return _missing(op.date)
    second = _find(plan, op.to_date)
    if second is None:
        return _missing(op.to_date)
    (week_a, idx_a), (week_b, idx_b) = first, second
    a, b = week_a.workouts[idx_a], week_b.workouts[idx_b]
    a.date, b.date = b.date, a.date
    a.day_of_week, b.day_of_week = b.day_of_week, a.day_of_week
    if week_a is not week_b:
        week_a.workouts[idx_a], week_b.workouts[idx_b] = b, a
    return _Outcome({week_a.week, week_b.week})


def _missing_week(number: int) -> _Outcome:
    return _Outcome(warning=f"No week {number} in plan")


def _shift_week(plan: list[TrainingWeek], op: ShiftWeek) -> _Outcome:
    week = _week_numbered(plan, op.week)
    if week is None:
        return _missing_week(op.week)
    for workout in week.workouts:
        workout.date = workout.date + timedelta(days=op.delta_days)
        workout.day_of_week = weekday_name(workout.date)
    return _Outcome({week.week})


def _adjust_volume(plan: list[TrainingWeek], op: AdjustWeekVolume) -> _Outcome:
    week = _week_numbered(plan, op.week)
    if week is None:
        return _missing_week(op.week)
    for workout in week.workouts:
        _scale(workout, op.factor)
    return _Outcome({week.week})


def _adjust_intensity(plan: list[TrainingWeek], op: AdjustIntensity) -> _Outcome:
    week = _week_numbered(plan, op.week)
    if week is None:
        return _missing_week(op.week)
    for workout in week.workouts:
        shifted = _shift_tag(workout.tags, op.direction)
        if shifted != workout.tags:
            workout.tags = shifted
            _append_note(workout, f"Intensity adjusted {op.direction}")
    return _Outcome({week.week})


def _set_property(plan: list[TrainingWeek], op: SetPlanProperty) -> _Outcome:
    if not op.id:
        return _Outcome(warning="SetPlanProperty requires a week id")
    week = next((w for w in plan if w.id == op.id), None)
    if week is None:
        return _Outcome(warning=f"No week with id {op.id}")
    if op.comment is not None:
        week.description = op.comment
    if op.tags is not None:
        week.tags = list(op.tags)
    return _Outcome({week.week})


def _annotate(plan: list[TrainingWeek], op: AddAnnotation) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    week, idx = found
    _append_note(week.workouts[idx], op.comment)
    return _Outcome({week.week})


def _explain(plan: list[TrainingWeek], op: ExplainWorkout) -> _Outcome:
    if op.date is not None and _find(plan, op.date) is None:
        return _missing(op.date)
    return _Outcome()


def _adjust_workout(plan: list[TrainingWeek], op: AdjustWorkoutIntensity) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    week, idx = found
    adjust_workout_intensity(week.workouts[idx], op.adjustment, op.reason)
    return _Outcome({week.week})


def _modify_from_feedback(plan: list[TrainingWeek], op: ModifyWorkoutBasedOnFeedback) -> _Outcome:
    found = _find(plan, op.date)
    if found is None:
        return _missing(op.date)
    week, idx = found
    workout = week.workouts[idx]
    mods = op.suggested_modifications
    if mods.intensity:
        adjust_workout_intensity(workout, mods.intensity, "feedback")
    if mods.distance is not None:
        workout.distance = mods.distance
    if mods.duration is not None:
        workout.duration = mods.duration
    if mods.type in ("easy", "recovery"):
        workout.tags = WorkoutTag.EASY
        if mods.type == "recovery":
            workout.name = "Recovery Run"
    if op.user_feedback:
        _append_note(workout, f"Feedback: {op.user_feedback}")
    return _Outcome({week.week})


_HANDLERS: dict[type, Callable[[list[TrainingWeek], object], _Outcome]] = {
    MoveWorkout: _move,
    ReplaceWorkout: _replace,
    ModifyWorkout: _modify,
    InsertWorkout: _insert,
    DeleteWorkout: _delete,
    SwapWorkouts: _swap,
    ShiftWeek: _shift_week,
    AdjustWeekVolume: _adjust_volume,
    AdjustIntensity: _adjust_intensity,
    SetPlanProperty: _set_property,
    AddAnnotation: _annotate,
    ExplainWorkout: _explain,
    AdjustWorkoutIntensity: _adjust_workout,
    ModifyWorkoutBasedOnFeedback: _modify_from_feedback,
}


def apply_operation(plan: list[TrainingWeek], op: PlanOperation) -> tuple[set[int], Optional[str]]:
    """Apply one operation to ``plan`` in place; returns (changed week numbers, warning)."""
    outcome = _HANDLERS[type(op)](plan, op)
    return outcome.changed, outcome.warning


def run_ops(plan: Sequence[TrainingWeek], ops: Sequence[PlanOperation]) -> PlanOpsResult:
    """Apply ``ops`` to a deep copy of ``plan`` and diff the result.

    Changed weeks get their aggregates recomputed. The input plan is never
    modified.
    """
    original = [week.model_dump(mode="json") for week in plan]
    working = [week.model_copy(deep=True) for week in plan]
    warnings: list[str] = []
    changed: set[int] = set()

    for op in ops:
        weeks, warning = apply_operation(working, op)
        changed |= weeks
        if warning:
            warnings.append(warning)

    for week in working:
        if week.week in changed:
            recompute_week_aggregates(week)

    changeset = compare(original, [week.model_dump(mode="json") for week in working])
    updated = [week for week in working if week.week in changed]
    logger.info(
        "Applied plan operations",
        extra={"ctx_operations": len(ops), "ctx_changed_weeks": sorted(changed), "ctx_warnings": len(warnings)},
    )
    return PlanOpsResult(updated_plan=working, updated_weeks=updated, changeset=changeset, warnings=warnings)


def simulate_plan_ops(plan: Sequence[TrainingWeek], ops: Sequence[PlanOperation]) -> dict:
    result = run_ops(plan, ops)
    return {"updated_weeks": result.updated_weeks, "changeset": result.changeset, "warnings": result.warnings}
