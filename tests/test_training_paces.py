"""Tests for week-by-week training pace interpolation."""

from __future__ import annotations

import math

import pytest

from core.services.training_paces import (
    TrainingPaces,
    derive_training_paces,
    get_training_paces,
    interpolation_fraction,
)
from core.services.vdot import race_paces_from_time


def _race(marathon=480.0, half=460.0, five_k=420.0):
    return {
        "1500": 380.0,
        "Mile": 390.0,
        "3K": 405.0,
        "5K": five_k,
        "10K": 435.0,
        "Half Marathon": half,
        "Marathon": marathon,
    }


def test_zone_offsets():
    paces = derive_training_paces(_race(marathon=481.0, half=462.0, five_k=421.0))
    assert paces.lt1 == (500, 520)   # ceil(481/5)*5 = 485
    assert paces.lt2 == (480, 500)   # ceil(462/5)*5 = 465
    assert paces.easy == (575, 635)
    assert paces.hills == (440, 460)  # ceil(421/5)*5 = 425


def test_zones_ordered_by_intensity():
    paces = derive_training_paces(race_paces_from_time("Half Marathon", "1:40:00"))
    for low, high in (paces.lt1, paces.lt2, paces.easy, paces.hills):
        assert low <= high
    assert paces.hills[0] < paces.lt2[0] < paces.lt1[0] < paces.easy[0]


def test_interpolation_fraction():
    assert interpolation_fraction(1, 1) == 0.0
    assert interpolation_fraction(11, 1) == 0.0
    assert interpolation_fraction(11, 6) == pytest.approx(0.5)
    assert interpolation_fraction(11, 11) == 1.0
    assert interpolation_fraction(11, 15) == 1.0


def test_first_week_uses_current_fitness():
    paces = get_training_paces("5K", "22:00", "5K", "19:00", 12, 1)
    current = race_paces_from_time("5K", "22:00")
    assert paces.race == pytest.approx(current)


def test_last_week_uses_goal_fitness():
    paces = get_training_paces("5K", "22:00", "5K", "19:00", 12, 12)
    goal = race_paces_from_time("5K", "19:00", goal=True)
    assert paces.race == pytest.approx(goal)


def test_midpoint_blends_linearly():
    current = race_paces_from_time("10K", "50:00")
    goal = race_paces_from_time("10K", "45:00", goal=True)
    paces = get_training_paces("10K", "50:00", "10K", "45:00", 3, 2)
    assert paces.race["Marathon"] == pytest.approx((current["Marathon"] + goal["Marathon"]) / 2)
    assert paces.lt1[0] == math.ceil(paces.race["Marathon"] / 5) * 5 + 15


def test_single_week_plan_does_not_divide_by_zero():
    paces = get_training_paces("5K", "22:00", "5K", "19:00", 1, 1)
    assert isinstance(paces, TrainingPaces)


def test_pace_lookup_by_zone_name():
    paces = derive_training_paces(_race())
    assert paces.pace_for("LT2") == paces.lt2
    assert paces.pace_for("5K") == 420.0
    assert paces.pace_value("Easy") == paces.easy[0]
    assert paces.easy_pace == float(paces.easy[0])
    with pytest.raises(KeyError):
        paces.pace_for("Tempo")
