"""Tests for the VDOT equivalence table and race pace lookup."""

from __future__ import annotations

import pytest

from core.errors import UnsupportedConfigurationError
from core.services.vdot import (
    EQUIVALENCE_TABLE,
    RACE_DISTANCE_MILES,
    RACE_DISTANCES,
    VDOT_MAX,
    VDOT_MIN,
    estimate_vdot,
    format_pace,
    lookup_equivalent_performance,
    parse_race_time,
    race_paces_from_time,
    vdot_from_race,
)


def test_table_spans_vdot_range():
    assert EQUIVALENCE_TABLE[0].vdot == VDOT_MIN
    assert EQUIVALENCE_TABLE[-1].vdot == VDOT_MAX
    assert len(EQUIVALENCE_TABLE) == VDOT_MAX - VDOT_MIN + 1


def test_table_rows_get_faster():
    for slower, faster in zip(EQUIVALENCE_TABLE, EQUIVALENCE_TABLE[1:]):
        for label in RACE_DISTANCES:
            assert faster.times[label] < slower.times[label]


def test_longer_distances_take_longer():
    row = EQUIVALENCE_TABLE[20]
    times = [row.times[label] for label in RACE_DISTANCES]
    assert times == sorted(times)


def test_vdot_50_matches_published_5k_time():
    row = next(r for r in EQUIVALENCE_TABLE if r.vdot == 50)
    # Daniels lists 19:57 for a VDOT 50 5K
    assert abs(row.times["5K"] - 1197) <= 15


def test_estimate_vdot_round_trips_table_row():
    row = next(r for r in EQUIVALENCE_TABLE if r.vdot == 45)
    assert estimate_vdot(10000, row.times["10K"]) == pytest.approx(45, abs=0.2)


def test_estimate_vdot_invalid_inputs():
    assert estimate_vdot(0, 1200) == VDOT_MIN
    assert estimate_vdot(5000, 0) == VDOT_MIN


def test_vdot_from_race_unknown_distance():
    with pytest.raises(ValueError, match="Unknown distance"):
        vdot_from_race("50K", 3600)


def test_parse_race_time_formats():
    assert parse_race_time("20:00") == 1200
    assert parse_race_time("1:30:15") == 5415
    assert parse_race_time(" 3:05:00 ") == 11100


@pytest.mark.parametrize("value", ["", "abc", "1:2:3:4", "20:-1", "12"])
def test_parse_race_time_rejects_bad_input(value):
    with pytest.raises(ValueError, match="Unsupported time format"):
        parse_race_time(value)


def test_format_pace():
    assert format_pace(420) == "7:00 min/mi"
    assert format_pace(425.4) == "7:05 min/mi"
    assert format_pace(0) == "n/a"


def test_current_lookup_reads_row_at_or_slower():
    row = next(r for r in EQUIVALENCE_TABLE if r.vdot == 50)
    time = row.times["5K"] + 3
    current = lookup_equivalent_performance("5K", f"{time // 60}:{time % 60:02d}")
    goal = lookup_equivalent_performance("5K", f"{time // 60}:{time % 60:02d}", goal=True)
    assert current.vdot == 49
    assert goal.vdot == 50


def test_lookup_slower_than_table_uses_slowest_row():
    assert lookup_equivalent_performance("5K", "59:00").vdot == VDOT_MIN
    assert lookup_equivalent_performance("5K", "59:00", goal=True).vdot == VDOT_MIN


def test_lookup_faster_than_table_uses_fastest_row():
    assert lookup_equivalent_performance("Marathon", "1:40:00").vdot == VDOT_MAX


def test_lookup_unknown_distance():
    with pytest.raises(UnsupportedConfigurationError):
        lookup_equivalent_performance("50K", "4:00:00")


def test_race_paces_divide_by_distance_miles():
    paces = race_paces_from_time("10K", "45:00")
    row = lookup_equivalent_performance("10K", "45:00")
    assert set(paces) == set(RACE_DISTANCES)
    assert paces["Mile"] == row.times["Mile"]
    assert paces["Marathon"] == pytest.approx(row.times["Marathon"] / RACE_DISTANCE_MILES["Marathon"])
    assert paces["1500"] < paces["5K"] < paces["Marathon"]
