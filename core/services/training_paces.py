"""Week-by-week training paces blended from current and goal fitness."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from core.services.vdot import RACE_DISTANCES, race_paces_from_time

TRAINING_ZONES: tuple[str, ...] = ("LT1", "LT2", "Easy", "Hills")

PaceRange = tuple[float, float]
Pace = Union[float, PaceRange]


@dataclass(frozen=True)
class TrainingPaces:
    """Per-mile paces (seconds) for one plan week.

    ``race`` holds the interpolated standard-distance paces; the named
    zones are (low, high) ranges derived from them.
    """
    race: dict[str, float]
    lt1: PaceRange
    lt2: PaceRange
    easy: PaceRange
    hills: PaceRange

    def pace_for(self, zone: str) -> Pace:
        zones = {"LT1": self.lt1, "LT2": self.lt2, "Easy": self.easy, "Hills": self.hills}
        if zone in zones:
            return zones[zone]
        if zone in self.race:
            return self.race[zone]
        raise KeyError(f"Unknown pace zone: {zone}")

    def pace_value(self, zone: str) -> float:
        """Single seconds-per-mile figure for a zone; ranges resolve to their low end."""
        pace = self.pace_for(zone)
        return float(pace[0]) if isinstance(pace, tuple) else float(pace)

    @property
    def easy_pace(self) -> float:
        return float(self.easy[0])


def _zone(base: float, offset: int, width: int) -> PaceRange:
    low = math.ceil(base / 5) * 5 + offset
    return (low, low + width)


def interpolation_fraction(num_weeks: int, week: int) -> float:
    if num_weeks <= 1:
        return 0.0
    frac = (week - 1) / (num_weeks - 1)
    return min(1.0, max(0.0, frac))


def derive_training_paces(race: dict[str, float]) -> TrainingPaces:
    return TrainingPaces(
        race=dict(race),
        lt1=_zone(race["Marathon"], 15, 20),
        lt2=_zone(race["Half Marathon"], 15, 20),
        easy=_zone(race["Marathon"], 90, 60),
        hills=_zone(race["5K"], 15, 20),
    )


def get_training_paces(
    current_race_distance: str,
    current_race_time: str,
    goal_race_distance: str,
    goal_race_time: str,
    num_weeks: int,
    week: int,
) -> TrainingPaces:
    """Linearly blend current toward goal paces by plan week, then derive zones."""
    current = race_paces_from_time(current_race_distance, current_race_time)
    goal = race_paces_from_time(goal_race_distance, goal_race_time, goal=True)
    frac = interpolation_fraction(num_weeks, week)
    blended = {label: current[label] + (goal[label] - current[label]) * frac for label in RACE_DISTANCES}
    return derive_training_paces(blended)


def paces_for_profile(profile, week: int) -> TrainingPaces:
    return get_training_paces(
        profile.current_race_distance,
        profile.current_race_time,
        profile.goal_race_distance,
        profile.goal_race_time,
        profile.num_weeks,
        week,
    )
