"""Tests for weekday assignment of key workout roles."""

from __future__ import annotations

from itertools import combinations

import pytest

from core.errors import UnsupportedConfigurationError
from core.services.day_assignment import assign_workout_days
from core.services.planning import WEEKDAYS

MON_TUE_THU_SAT = ["Monday", "Tuesday", "Thursday", "Saturday"]


def test_four_days_base_phase():
    result = assign_workout_days(MON_TUE_THU_SAT, 0, race_specific=False)
    assert result.as_dict() == {"LongRunDay": "Tuesday", "LT2Day": "Saturday"}


def test_four_days_race_specific():
    result = assign_workout_days(MON_TUE_THU_SAT, 0, race_specific=True)
    assert result.as_dict() == {"LT2Day": "Tuesday", "VO2RaceDay": "Saturday"}


def test_five_days_with_gaps():
    result = assign_workout_days(["Monday", "Tuesday", "Thursday", "Friday", "Sunday"], 0, False)
    assert result.as_dict() == {
        "LT1Day": "Sunday",
        "LT2Day": "Tuesday",
        "VO2RaceDay": "Friday",
        "LongRunDay": "Monday",
    }


def test_five_consecutive_days():
    result = assign_workout_days(WEEKDAYS[:5], 0, False)
    assert result.as_dict() == {
        "LT1Day": "Monday",
        "LT2Day": "Wednesday",
        "VO2RaceDay": "Friday",
        "LongRunDay": "Tuesday",
    }


def test_five_days_four_and_one_blocks():
    result = assign_workout_days(["Monday", "Tuesday", "Wednesday", "Thursday", "Saturday"], 0, False)
    assert result.as_dict() == {
        "LT1Day": "Tuesday",
        "LT2Day": "Thursday",
        "VO2RaceDay": "Saturday",
        "LongRunDay": "Monday",
    }


def test_six_days_no_double_threshold():
    result = assign_workout_days(WEEKDAYS[:6], 0, False)
    assert result.as_dict() == {
        "LT1Day": "Tuesday",
        "LT2Day": "Thursday",
        "VO2RaceDay": "Saturday",
        "LongRunDay": "Monday",
    }


def test_six_days_reordered_after_missing_day():
    days = ["Monday", "Tuesday", "Thursday", "Friday", "Saturday", "Sunday"]
    result = assign_workout_days(days, 0, False)
    assert result.as_dict() == {
        "LT1Day": "Friday",
        "LT2Day": "Sunday",
        "VO2RaceDay": "Tuesday",
        "LongRunDay": "Thursday",
    }


def test_six_days_one_double_threshold():
    result = assign_workout_days(WEEKDAYS[:6], 1, False)
    assert result.as_dict() == {
        "doubleThresholdDays": ["Tuesday"],
        "LT2Day": "Thursday",
        "VO2RaceDay": "Saturday",
        "LongRunDay": "Monday",
    }


def test_seven_days_no_double_threshold():
    result = assign_workout_days(WEEKDAYS, 0, False)
    assert result.as_dict() == {
        "LT1Day": "Tuesday",
        "LT2Day": "Thursday",
        "VO2RaceDay": "Saturday",
        "LongRunDay": "Sunday",
    }


def test_seven_days_two_double_threshold():
    result = assign_workout_days(WEEKDAYS, 2, False)
    assert result.as_dict() == {
        "doubleThresholdDays": ["Tuesday", "Thursday"],
        "VO2RaceDay": "Saturday",
        "LongRunDay": "Sunday",
    }


def test_none_double_threshold_count_means_unset():
    assert assign_workout_days(WEEKDAYS, None, False) == assign_workout_days(WEEKDAYS, 0, False)


@pytest.mark.parametrize("count", [0, 1, 2, 3, 8])
def test_unsupported_day_counts(count):
    days = list(WEEKDAYS[:count]) if count <= 7 else list(WEEKDAYS) + ["Monday"]
    with pytest.raises(UnsupportedConfigurationError):
        assign_workout_days(days, 0, False)


def test_unsupported_double_threshold_count():
    with pytest.raises(UnsupportedConfigurationError):
        assign_workout_days(WEEKDAYS, 3, False)


def test_rejects_duplicate_or_unknown_days():
    with pytest.raises(UnsupportedConfigurationError):
        assign_workout_days(["Monday", "Monday", "Tuesday", "Friday"], 0, False)
    with pytest.raises(UnsupportedConfigurationError):
        assign_workout_days(["Monday", "Funday", "Tuesday", "Friday"], 0, False)


@pytest.mark.parametrize("size", [4, 5, 6, 7])
@pytest.mark.parametrize("race_specific", [False, True])
@pytest.mark.parametrize("double_threshold", [0, 1, 2])
def test_every_assignment_uses_available_days_once(size, race_specific, double_threshold):
    for days in combinations(WEEKDAYS, size):
        result = assign_workout_days(list(days), double_threshold, race_specific)
        roles = [*result.double_threshold_days]
        for day in (result.lt1_day, result.lt2_day, result.vo2_race_day, result.long_run_day):
            if day:
                roles.append(day)
        assert all(day in days for day in roles)
        assert len(roles) == len(set(roles))
