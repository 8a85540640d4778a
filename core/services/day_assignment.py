"""Assigns key-workout roles to weekdays.

Each supported training-day count has a hand-tuned spacing pattern. The
patterns are lookup tables, not a search: the offsets below are the
contract and every returned weekday comes from the athlete's own list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from core.errors import UnsupportedConfigurationError
from core.services.planning import WEEKDAYS


@dataclass
class WorkoutDayAssignment:
    lt1_day: Optional[str] = None
    lt2_day: Optional[str] = None
    vo2_race_day: Optional[str] = None
    long_run_day: Optional[str] = None
    double_threshold_days: list[str] = field(default_factory=list)

    def key_days(self) -> list[str]:
        """Days that carry an assigned threshold or long-run role."""
        days = list(self.double_threshold_days)
        for day in (self.lt1_day, self.lt2_day, self.long_run_day):
            if day:
                days.append(day)
        return days

    def as_dict(self) -> dict[str, object]:
        out: dict[str, object] = {}
        if self.double_threshold_days:
            out["doubleThresholdDays"] = list(self.double_threshold_days)
        for key, value in (
            ("LT1Day", self.lt1_day),
            ("LT2Day", self.lt2_day),
            ("VO2RaceDay", self.vo2_race_day),
            ("LongRunDay", self.long_run_day),
        ):
            if value:
                out[key] = value
        return out


def _reorder_after(day: str) -> list[str]:
    idx = WEEKDAYS.index(day)
    return [*WEEKDAYS[idx + 1:], *WEEKDAYS[:idx]]


def _assign_four(days: Sequence[str], double_threshold: int, race_specific: bool) -> WorkoutDayAssignment:
    if race_specific:
        return WorkoutDayAssignment(lt2_day=days[1], vo2_race_day=days[3])
    return WorkoutDayAssignment(long_run_day=days[1], lt2_day=days[3])


def _assign_five(days: Sequence[str], double_threshold: int, race_specific: bool) -> WorkoutDayAssignment:
    first_gap, second_gap = [WEEKDAYS.index(d) for d in WEEKDAYS if d not in days]
    inner = list(WEEKDAYS[first_gap + 1:second_gap])
    wrapped = [*WEEKDAYS[second_gap + 1:], *WEEKDAYS[:first_gap]]
    main, side = sorted([inner, wrapped], key=len, reverse=True)

    if len(main) == 5:
        return WorkoutDayAssignment(lt1_day=main[0], lt2_day=main[2], vo2_race_day=main[4], long_run_day=main[1])
    if len(main) == 4:
        return WorkoutDayAssignment(lt1_day=main[1], lt2_day=main[3], vo2_race_day=side[0], long_run_day=main[0])
    return WorkoutDayAssignment(lt1_day=main[0], lt2_day=main[2], vo2_race_day=side[1], long_run_day=main[1])


def _with_double_threshold(
    days: Sequence[str], double_threshold: int, hills_idx: int, long_idx: int
) -> WorkoutDayAssignment:
    if double_threshold == 1:
        return WorkoutDayAssignment(
            double_threshold_days=[days[1]], lt2_day=days[3], vo2_race_day=days[hills_idx], long_run_day=days[long_idx]
        )
    return WorkoutDayAssignment(
        double_threshold_days=[days[1], days[3]], vo2_race_day=days[hills_idx], long_run_day=days[long_idx]
    )


def _assign_six(days: Sequence[str], double_threshold: int, race_specific: bool) -> WorkoutDayAssignment:
    if double_threshold:
        return _with_double_threshold(days, double_threshold, hills_idx=5, long_idx=0)
    missing = next(d for d in WEEKDAYS if d not in days)
    ordered = _reorder_after(missing)
    return WorkoutDayAssignment(lt1_day=ordered[1], lt2_day=ordered[3], vo2_race_day=ordered[5], long_run_day=ordered[0])


def _assign_seven(days: Sequence[str], double_threshold: int, race_specific: bool) -> WorkoutDayAssignment:
    if double_threshold:
        return _with_double_threshold(days, double_threshold, hills_idx=5, long_idx=6)
    return WorkoutDayAssignment(lt1_day=days[1], lt2_day=days[3], vo2_race_day=days[5], long_run_day=days[6])


_PATTERNS: dict[int, Callable[[Sequence[str], int, bool], WorkoutDayAssignment]] = {
    4: _assign_four,
    5: _assign_five,
    6: _assign_six,
    7: _assign_seven,
}


def assign_workout_days(
    training_days: Sequence[str],
    num_days_double_threshold: Optional[int],
    race_specific: bool,
) -> WorkoutDayAssignment:
    """Place LT1/LT2/VO2-race/long-run roles on the athlete's training days.

    Raises UnsupportedConfigurationError for day counts outside 4..7, for
    non-canonical or repeated weekdays, and for double-threshold counts
    outside 0..2.
    """
    days = list(training_days)
    if len(set(days)) != len(days) or any(d not in WEEKDAYS for d in days):
        raise UnsupportedConfigurationError(f"training days must be distinct canonical weekdays: {days}")
    pattern = _PATTERNS.get(len(days))
    if pattern is None:
        raise UnsupportedConfigurationError(
            f"Unable to assign workout days for {len(days)} training days; supported counts are 4-7"
        )
    double_threshold = int(num_days_double_threshold or 0)
    if double_threshold not in (0, 1, 2):
        raise UnsupportedConfigurationError(f"Unsupported double-threshold count: {double_threshold}")
    return pattern(days, double_threshold, race_specific)


def assign_for_profile(profile, race_specific: bool) -> WorkoutDayAssignment:
    return assign_workout_days(profile.training_days, profile.num_days_double_threshold, race_specific)
