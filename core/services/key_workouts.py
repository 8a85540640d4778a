"""Key-workout drafting boundary and calendar placement.

Hard sessions are drafted externally (an LLM in production) as segment
lists. Nothing the drafter says about distance, duration or day is used:
drafts are validated, placed on the weekdays chosen by the day assigner,
re-measured with the week's paces and padded to a clean total.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from core.errors import InvalidPlanFormatError
from core.schemas import TrainingWeek, TrainingWorkout, WorkoutSegment, WorkoutTag
from core.services.day_assignment import WorkoutDayAssignment, assign_for_profile
from core.services.planning import day_to_date, week_end_date, week_start_date, week_target_for
from core.services.segments import evaluate_segments, extract_pace_entries
from core.services.training_paces import TrainingPaces, paces_for_profile
from core.validators import AthleteProfile, Experience

logger = logging.getLogger(__name__)

MIN_PADDING_SECONDS = 600
MAX_PADDING_SECONDS = 1200

LT1_REP_SECONDS = (360, 540, 720)
LT2_REP_SECONDS = (180, 360, 540)


@dataclass(frozen=True)
class ThresholdTargets:
    lt1_minutes: int
    lt2_minutes: int


def threshold_time_targets(profile: AthleteProfile, week: int) -> ThresholdTargets:
    """Minutes of LT1/LT2 work per session for the given plan week."""
    if profile.experience == Experience.ADVANCED and profile.num_days_double_threshold:
        return ThresholdTargets(30, 30)
    mileage = week_target_for(profile, week).mileage
    for floor, lt1, lt2 in ((50, 48, 42), (40, 42, 36), (30, 36, 30)):
        if mileage > floor:
            return ThresholdTargets(lt1, lt2)
    return ThresholdTargets(30, 25)


@dataclass
class DraftRequest:
    """What the drafter is asked to produce for one week."""
    week: int
    race_specific: bool
    goal_race_distance: str
    experience: str
    num_lt1: int
    num_lt2: int
    num_hills: int = 0
    num_long_run: int = 0
    lt1_minutes: int = 30
    lt2_minutes: int = 25
    lt1_rep_seconds: tuple[int, ...] = LT1_REP_SECONDS
    lt2_rep_seconds: tuple[int, ...] = LT2_REP_SECONDS
    double_threshold_days: list[str] = field(default_factory=list)

    def as_payload(self) -> dict[str, Any]:
        return asdict(self)


def build_draft_request(
    profile: AthleteProfile,
    week: int,
    assignment: Optional[WorkoutDayAssignment] = None,
) -> DraftRequest:
    target = week_target_for(profile, week)
    assignment = assignment or assign_for_profile(profile, target.race_specific)
    targets = threshold_time_targets(profile, week)
    double = len(assignment.double_threshold_days)
    return DraftRequest(
        week=week,
        race_specific=target.race_specific,
        goal_race_distance=profile.goal_race_distance,
        experience=profile.experience.value,
        num_lt1=double + (1 if assignment.lt1_day else 0),
        num_lt2=double + (1 if assignment.lt2_day else 0),
        lt1_minutes=targets.lt1_minutes,
        lt2_minutes=targets.lt2_minutes,
        double_threshold_days=list(assignment.double_threshold_days),
    )


class KeyWorkoutDrafter(Protocol):
    def draft(self, request: DraftRequest) -> list[dict]:
        ...


class KeyWorkoutDraft(BaseModel):
    """One drafted hard session as returned by the drafter."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    tags: Literal["LT1", "LT2", "Hills", "LongRun"]
    workout: Optional[list[WorkoutSegment]] = None
    warmup: Optional[list[WorkoutSegment]] = None
    cooldown: Optional[list[WorkoutSegment]] = None
    target_heart_rate: Optional[str] = Field(default=None, alias="targetHeartRate")
    target_effort_level: Optional[str] = Field(default=None, alias="targetEffortLevel")
    notes: Optional[str] = None


_DRAFT_LIST = TypeAdapter(list[KeyWorkoutDraft])


def _format_errors(exc: ValidationError) -> list[str]:
    return [
        "/".join(str(part) for part in err["loc"]) + f": {err['msg']}"
        for err in exc.errors()
    ]


def validate_drafts(raw: Any) -> list[KeyWorkoutDraft]:
    """Validate a drafter response, all or nothing.

    Accepts either a bare list or the ``{"workouts": [...]}`` envelope.
    """
    if isinstance(raw, dict) and "workouts" in raw:
        raw = raw["workouts"]
    try:
        return _DRAFT_LIST.validate_python(raw)
    except ValidationError as exc:
        errors = _format_errors(exc)
        logger.warning("Rejected drafted workouts", extra={"ctx_error_count": len(errors)})
        raise InvalidPlanFormatError("Drafted workouts do not match the workout schema", errors) from exc


def pad_to_clean_distance(core_miles: float, easy_pace: float) -> float:
    """Smallest clean total that adds 10-20 minutes of easy running to ``core_miles``."""
    total = math.ceil(core_miles) + 1
    while (total - core_miles) * easy_pace <= MIN_PADDING_SECONDS:
        total += 1
    while (total - core_miles) * easy_pace >= MAX_PADDING_SECONDS and total - 0.5 > core_miles:
        total -= 0.5
    return total


def _format_miles(miles: float) -> str:
    return f"{miles:g}"


def _finalize(
    draft: KeyWorkoutDraft,
    day: str,
    when,
    prefix: str,
    paces: TrainingPaces,
) -> TrainingWorkout:
    warm = evaluate_segments(draft.warmup, paces).rounded()
    main = evaluate_segments(draft.workout, paces).rounded()
    core_miles = warm.distance + main.distance
    total = pad_to_clean_distance(core_miles, paces.easy_pace)
    added_seconds = (total - core_miles) * paces.easy_pace
    return TrainingWorkout(
        name=prefix + draft.name,
        date=when,
        day_of_week=day,
        tags=WorkoutTag(draft.tags),
        workout=draft.workout,
        warmup=draft.warmup,
        cooldown=f"Cooldown to {_format_miles(total)}",
        distance=total,
        duration=warm.duration + main.duration + added_seconds,
        target_heart_rate=draft.target_heart_rate,
        target_pace=extract_pace_entries(draft.workout, paces),
        notes=draft.notes,
    )


def schedule_key_workouts(
    profile: AthleteProfile,
    drafts: list[KeyWorkoutDraft],
    week: int,
    paces: Optional[TrainingPaces] = None,
    assignment: Optional[WorkoutDayAssignment] = None,
) -> TrainingWeek:
    """Place validated drafts on their assigned days and build the week shell.

    Double-threshold days take an LT1 draft in the morning and an LT2 draft
    in the afternoon. Drafts without a matching slot are dropped.
    """
    target = week_target_for(profile, week)
    assignment = assignment or assign_for_profile(profile, target.race_specific)
    paces = paces or paces_for_profile(profile, week)
    dates = day_to_date(profile.plan_start_date, week)

    lt1 = [d for d in drafts if d.tags == "LT1"]
    lt2 = [d for d in drafts if d.tags == "LT2"]
    hills = [d for d in drafts if d.tags == "Hills"]
    long_runs = [d for d in drafts if d.tags == "LongRun"]

    slots: list[tuple[KeyWorkoutDraft, str, str]] = []
    for day in assignment.double_threshold_days:
        if not lt1 or not lt2:
            break
        slots.append((lt1.pop(0), day, "(AM) "))
        slots.append((lt2.pop(0), day, "(PM) "))
    for pool, day in (
        (lt1, assignment.lt1_day),
        (lt2, assignment.lt2_day),
        (hills, assignment.vo2_race_day),
        (long_runs, assignment.long_run_day),
    ):
        if pool and day:
            slots.append((pool.pop(0), day, ""))

    dropped = len(lt1) + len(lt2) + len(hills) + len(long_runs)
    if dropped:
        logger.info("Dropped unplaceable drafts", extra={"ctx_week": week, "ctx_dropped": dropped})

    workouts = [_finalize(draft, day, dates[day], prefix, paces) for draft, day, prefix in slots]
    return TrainingWeek(
        id=f"week-{week}",
        week=week,
        start_date=week_start_date(profile.plan_start_date, week),
        end_date=week_end_date(profile.plan_start_date, week),
        total_mileage=sum(w.distance for w in workouts),
        total_duration=sum(w.duration for w in workouts),
        workouts=workouts,
    )
