"""End-to-end week and plan generation."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from core.schemas import TrainingWeek
from core.services.day_assignment import assign_for_profile
from core.services.easy_runs import fill_easy_runs
from core.services.key_workouts import (
    KeyWorkoutDraft,
    KeyWorkoutDrafter,
    build_draft_request,
    schedule_key_workouts,
    validate_drafts,
)
from core.services.planning import WEEKDAYS, week_target_for
from core.services.training_paces import paces_for_profile
from core.validators import AthleteProfile

logger = logging.getLogger(__name__)


def recompute_week_aggregates(week: TrainingWeek) -> TrainingWeek:
    """Recompute totals from the workouts in place and return the week."""
    week.total_mileage = round(sum(w.distance for w in week.workouts), 1)
    week.total_duration = sum(w.duration for w in week.workouts)
    return week


def post_process_week(week: TrainingWeek, training_days: Sequence[str]) -> TrainingWeek:
    """Order workouts by the athlete's training-day order and finalize totals.

    The sort is stable, so AM runs stay ahead of PM runs on the same day.
    Workouts on a day outside ``training_days`` sort after all others.
    """
    order = {day: idx for idx, day in enumerate(training_days)}
    fallback = len(training_days) + len(WEEKDAYS)
    workouts = sorted(week.workouts, key=lambda w: order.get(w.day_of_week, fallback))
    result = week.model_copy(update={"workouts": workouts})
    return recompute_week_aggregates(result)


def assemble_week(
    profile: AthleteProfile,
    week: int,
    drafts: Sequence[KeyWorkoutDraft],
) -> TrainingWeek:
    """Schedule already-validated drafts, fill easy mileage and post-process."""
    target = week_target_for(profile, week)
    assignment = assign_for_profile(profile, target.race_specific)
    paces = paces_for_profile(profile, week)
    shell = schedule_key_workouts(profile, list(drafts), week, paces=paces, assignment=assignment)
    filled = fill_easy_runs(profile, shell, target=target, paces=paces, assignment=assignment)
    result = post_process_week(filled, profile.training_days)
    logger.info(
        "Generated plan week",
        extra={
            "ctx_week": week,
            "ctx_target_mileage": target.mileage,
            "ctx_total_mileage": result.total_mileage,
            "ctx_workouts": len(result.workouts),
        },
    )
    return result


def generate_complete_week(
    profile: AthleteProfile,
    week: int,
    drafter: KeyWorkoutDrafter,
) -> TrainingWeek:
    request = build_draft_request(profile, week)
    drafts = validate_drafts(drafter.draft(request))
    return assemble_week(profile, week, drafts)


def generate_plan(
    profile: AthleteProfile,
    drafter: KeyWorkoutDrafter,
    num_weeks: Optional[int] = None,
) -> list[TrainingWeek]:
    """Generate weeks 1..N; a rejected draft aborts the whole plan."""
    total = num_weeks or profile.num_weeks
    return [generate_complete_week(profile, week, drafter) for week in range(1, total + 1)]
