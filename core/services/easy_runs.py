"""Fills the non-key days of a week with easy mileage."""

from __future__ import annotations

import logging
import math
from typing import Optional

from core.schemas import TrainingWeek, TrainingWorkout, WorkoutTag
from core.services.day_assignment import WorkoutDayAssignment, assign_for_profile
from core.services.planning import WeekTarget, day_to_date, week_target_for
from core.services.training_paces import TrainingPaces, paces_for_profile
from core.validators import AthleteProfile

logger = logging.getLogger(__name__)

MAX_SINGLE_RUN_SECONDS = 4200
PM_RUN_SECONDS = 1500
LONG_RUN_SHARE = 0.2
MAX_LONG_RUN = {"Marathon": 20}
DEFAULT_MAX_LONG_RUN = 16


def _round_duration(seconds: float) -> int:
    return math.ceil(seconds / 300) * 300


def long_run_miles(weekly_mileage: float, goal_race_distance: str) -> int:
    cap = MAX_LONG_RUN.get(goal_race_distance, DEFAULT_MAX_LONG_RUN)
    return min(cap, math.floor(LONG_RUN_SHARE * weekly_mileage) + 1)


def divide_easy_mileage(miles: float, num_days: int) -> list[float]:
    """Split ``miles`` into ``num_days`` half-mile multiples, remainder round-robin from the first day."""
    if num_days <= 0:
        return []
    miles = math.floor(max(0.0, miles) * 2) / 2
    base = math.floor(miles / num_days * 2) / 2
    shares = [base] * num_days
    leftover = round((miles - base * num_days) * 2)
    for i in range(leftover):
        shares[i % num_days] += 0.5
    return shares


def max_single_run_miles(easy_pace: float) -> float:
    """Longest half-mile multiple that stays within the single-run cap."""
    return math.floor(MAX_SINGLE_RUN_SECONDS / easy_pace * 2) / 2


def split_double(miles: float, easy_pace: float) -> Optional[tuple[float, float]]:
    """AM/PM split for a day too long to run in one go, or None when it fits.

    Neither run exceeds the single-run cap. Mileage that does not fit in
    two capped runs is dropped and logged.
    """
    cap = max_single_run_miles(easy_pace)
    if miles <= cap:
        return None
    pm = min(cap, math.ceil(PM_RUN_SECONDS / easy_pace))
    am = min(cap, miles - pm)
    pm = min(cap, miles - am)
    shortfall = miles - am - pm
    if shortfall > 0:
        logger.warning(
            "Easy day exceeds two capped runs",
            extra={"ctx_miles": miles, "ctx_cap_miles": cap, "ctx_shortfall": shortfall},
        )
    return am, pm


def _easy(name: str, miles: float, day: str, when, paces: TrainingPaces) -> TrainingWorkout:
    return TrainingWorkout(
        name=name,
        date=when,
        day_of_week=day,
        tags=WorkoutTag.EASY,
        distance=miles,
        duration=_round_duration(miles * paces.easy_pace),
        target_heart_rate="<70% MHR",
        target_pace=[{"zone": "Easy", "pace": paces.easy}],
    )


def fill_easy_runs(
    profile: AthleteProfile,
    week: TrainingWeek,
    target: Optional[WeekTarget] = None,
    paces: Optional[TrainingPaces] = None,
    assignment: Optional[WorkoutDayAssignment] = None,
) -> TrainingWeek:
    """Add the long run (when its day is free) and easy runs up to the weekly target.

    Returns a new week; the input is not modified.
    """
    target = target or week_target_for(profile, week.week)
    assignment = assignment or assign_for_profile(profile, target.race_specific)
    paces = paces or paces_for_profile(profile, week.week)
    dates = day_to_date(profile.plan_start_date, week.week)
    workouts = list(week.workouts)

    has_long_run = any(w.tags == WorkoutTag.LONG_RUN for w in workouts)
    if assignment.long_run_day and not has_long_run:
        day = assignment.long_run_day
        miles = long_run_miles(target.mileage, profile.goal_race_distance)
        workouts.append(
            TrainingWorkout(
                name="Long Run + Hill Strides",
                date=dates[day],
                day_of_week=day,
                tags=WorkoutTag.LONG_RUN,
                distance=miles,
                duration=_round_duration(miles * paces.easy_pace),
                target_heart_rate="<70% MHR",
                target_pace=[{"zone": "Easy", "pace": paces.easy}],
                notes="Progress into LT1" if len(profile.training_days) == 4 else "Hill strides @5k effort after",
            )
        )

    busy = {w.day_of_week for w in workouts}
    easy_days = [d for d in profile.training_days if d not in busy]
    scheduled = sum(w.distance for w in workouts)
    remaining = max(0.0, target.mileage - scheduled)

    if not easy_days:
        if remaining > 0:
            logger.warning(
                "No free days for easy mileage",
                extra={"ctx_week": week.week, "ctx_remaining": remaining},
            )
        return week.model_copy(update={"workouts": workouts})

    for day, miles in zip(easy_days, divide_easy_mileage(remaining, len(easy_days))):
        if miles <= 0:
            continue
        split = split_double(miles, paces.easy_pace)
        if split is None:
            workouts.append(_easy("Easy Run", miles, day, dates[day], paces))
        else:
            am, pm = split
            workouts.append(_easy("AM Easy Run", am, day, dates[day], paces))
            workouts.append(_easy("PM Easy Run", pm, day, dates[day], paces))

    logger.debug(
        "Filled easy mileage",
        extra={"ctx_week": week.week, "ctx_easy_days": len(easy_days), "ctx_remaining": remaining},
    )
    return week.model_copy(update={"workouts": workouts})
