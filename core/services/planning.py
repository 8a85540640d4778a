from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

WEEKDAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

RACE_SPECIFIC_WEEKS = {"1500": 4, "Mile": 4, "3K": 4, "5K": 6, "10K": 6, "Half Marathon": 8, "Marathon": 10}
TAPER_FRACTIONS: dict[str, tuple[float, ...]] = {
    "1500": (0.9, 0.8),
    "Mile": (0.9, 0.8),
    "3K": (0.9, 0.8),
    "5K": (0.9, 0.8),
    "10K": (0.9, 0.7),
    "Half Marathon": (0.9, 0.8, 0.6),
    "Marathon": (0.9, 0.8, 0.6, 0.5),
}


@dataclass(frozen=True)
class WeekTarget:
    week: int
    mileage: float
    race_specific: bool
    taper: bool


def get_mileage_progression(
    current_mileage: float,
    goal_mileage: float,
    num_weeks: int,
    goal_race_distance: str,
) -> list[WeekTarget]:
    """Per-week target mileage: ramp from current toward goal, then taper.

    Each base week grows by max(3, 10%) rounded up, capped at the goal. The
    closing weeks take ceil(peak * fraction) from the distance's taper table;
    plans shorter than the table keep its trailing (deepest) fractions.
    """
    if num_weeks < 1:
        raise ValueError("num_weeks must be >= 1")
    if goal_race_distance not in TAPER_FRACTIONS:
        raise ValueError(f"Unknown distance: {goal_race_distance}")

    fractions = TAPER_FRACTIONS[goal_race_distance]
    taper = fractions[len(fractions) - min(len(fractions), num_weeks - 1):]
    base_weeks = num_weeks - len(taper)
    before_race_specific = max(0, num_weeks - RACE_SPECIFIC_WEEKS[goal_race_distance])
    cap = max(float(goal_mileage), float(current_mileage))

    mileage = float(current_mileage)
    rows = [WeekTarget(week=1, mileage=mileage, race_specific=False, taper=False)]
    for i in range(1, base_weeks):
        mileage = min(math.ceil(mileage + max(3, 0.1 * mileage)), cap)
        rows.append(WeekTarget(week=i + 1, mileage=mileage, race_specific=i >= before_race_specific, taper=False))

    peak = rows[-1].mileage
    for frac in taper:
        rows.append(WeekTarget(week=len(rows) + 1, mileage=math.ceil(peak * frac), race_specific=True, taper=True))
    return rows


def mileage_progression_for_profile(profile) -> list[WeekTarget]:
    return get_mileage_progression(
        profile.current_mileage,
        profile.goal_mileage,
        profile.num_weeks,
        profile.goal_race_distance,
    )


def week_target_for(profile, week: int) -> WeekTarget:
    progression = mileage_progression_for_profile(profile)
    if week < 1 or week > len(progression):
        raise ValueError(f"week must be within 1..{len(progression)}")
    return progression[week - 1]


def first_plan_monday(plan_start: date) -> date:
    return plan_start + timedelta(days=(7 - plan_start.weekday()) % 7)


def week_start_date(plan_start: date, week: int) -> date:
    """Monday that opens plan week ``week`` (the first Monday on or after the plan start is week 1)."""
    return first_plan_monday(plan_start) + timedelta(days=(week - 1) * 7)


def week_end_date(plan_start: date, week: int) -> date:
    return week_start_date(plan_start, week) + timedelta(days=6)


def day_to_date(plan_start: date, week: int) -> dict[str, date]:
    start = week_start_date(plan_start, week)
    return {name: start + timedelta(days=idx) for idx, name in enumerate(WEEKDAYS)}


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def count_plan_weeks(plan_start: date, race_date: date) -> int:
    """Monday-aligned weeks from the first plan Monday through the race date."""
    delta = (race_date - first_plan_monday(plan_start)).days
    if delta < 0:
        return 1
    return delta // 7 + 1
