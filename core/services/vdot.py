"""VDOT equivalence table and race-performance pace lookup.

VDOT is a measure of running ability derived from race performances.
This module builds a fixed table of equivalent finishing times across the
seven standard race distances (one row per integer VDOT) and converts a
race result into a vector of per-mile paces at every distance.

Reference: Daniels' Running Formula, 3rd Edition (2013). Rows are solved
from the Daniels/Gilbert oxygen-cost and drop-off equations.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import exp

from core.errors import UnsupportedConfigurationError


RACE_DISTANCES: tuple[str, ...] = ("1500", "Mile", "3K", "5K", "10K", "Half Marathon", "Marathon")

# Standard race distances in metres
RACE_DISTANCES_M = {
    "1500": 1500,
    "Mile": 1609.34,
    "3K": 3000,
    "5K": 5000,
    "10K": 10000,
    "Half Marathon": 21097.5,
    "Marathon": 42195,
}

# Divisors used to turn a finishing time into seconds per mile
RACE_DISTANCE_MILES = {
    "1500": 0.93,
    "Mile": 1.0,
    "3K": 1.86,
    "5K": 3.11,
    "10K": 6.21,
    "Half Marathon": 13.11,
    "Marathon": 26.22,
}

VDOT_MIN = 30
VDOT_MAX = 85


@dataclass(frozen=True)
class EquivalentPerformance:
    """One row of the equivalence table: finishing seconds at every distance."""
    vdot: int
    times: dict[str, int]


def _vo2_from_velocity(v: float) -> float:
    """Daniels' oxygen cost equation: mL/kg/min from velocity in m/min."""
    return -4.60 + 0.182258 * v + 0.000104 * v * v


def _percent_max(t_min: float) -> float:
    """Fraction of VO2max sustainable for t_min minutes (Daniels' drop-off curve)."""
    return 0.8 + 0.1894393 * exp(-0.012778 * t_min) + 0.2989558 * exp(-0.1932605 * t_min)


def estimate_vdot(distance_m: float, time_seconds: float) -> float:
    """Estimate VDOT from a race distance (m) and finish time (seconds).

    Uses the Daniels/Gilbert VO2 and percent-max equations.
    Returns a float VDOT; round to int for table lookup.
    """
    if distance_m <= 0 or time_seconds <= 0:
        return float(VDOT_MIN)
    t_min = time_seconds / 60.0
    velocity = distance_m / t_min  # m/min
    vo2 = _vo2_from_velocity(velocity)
    pct = _percent_max(t_min)
    if pct <= 0:
        return float(VDOT_MIN)
    return round(vo2 / pct, 1)


def vdot_from_race(distance_label: str, time_seconds: float) -> float:
    """Convenience wrapper: estimate VDOT from a named distance and finish time."""
    dist_m = RACE_DISTANCES_M.get(distance_label)
    if dist_m is None:
        raise ValueError(f"Unknown distance: {distance_label}. Use one of {list(RACE_DISTANCES)}")
    return estimate_vdot(dist_m, time_seconds)


def equivalent_time_seconds(vdot: float, distance_m: float) -> int:
    """Solve for the finishing time (whole seconds) that scores ``vdot`` over ``distance_m``.

    Bisects on time in minutes; the VDOT score falls monotonically as the
    time grows over the bracket used here.
    """
    lo, hi = 1.0, 1200.0
    for _ in range(80):
        mid = (lo + hi) / 2.0
        score = _vo2_from_velocity(distance_m / mid) / _percent_max(mid)
        if score > vdot:
            lo = mid
        else:
            hi = mid
    return int(round((lo + hi) / 2.0 * 60.0))


def _build_equivalence_table() -> tuple[EquivalentPerformance, ...]:
    rows = []
    for vdot in range(VDOT_MIN, VDOT_MAX + 1):
        times = {label: equivalent_time_seconds(vdot, RACE_DISTANCES_M[label]) for label in RACE_DISTANCES}
        rows.append(EquivalentPerformance(vdot=vdot, times=times))
    return tuple(rows)


# Ordered slowest (VDOT 30) to fastest (VDOT 85).
EQUIVALENCE_TABLE: tuple[EquivalentPerformance, ...] = _build_equivalence_table()


def parse_race_time(value: str) -> int:
    """Parse 'H:MM:SS' or 'MM:SS' into whole seconds."""
    parts = str(value or "").strip().split(":")
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        raise ValueError(f"Unsupported time format: {value}") from None
    if any(n < 0 for n in numbers):
        raise ValueError(f"Unsupported time format: {value}")
    if len(numbers) == 3:
        h, m, s = numbers
        return h * 3600 + m * 60 + s
    if len(numbers) == 2:
        m, s = numbers
        return m * 60 + s
    raise ValueError(f"Unsupported time format: {value}")


def format_pace(seconds_per_mile: float) -> str:
    """Format seconds-per-mile as 'M:SS min/mi' for display."""
    if seconds_per_mile <= 0:
        return "n/a"
    total = int(round(seconds_per_mile))
    return f"{total // 60}:{total % 60:02d} min/mi"


def lookup_equivalent_performance(distance: str, time: str, goal: bool = False) -> EquivalentPerformance:
    """Pick the table row that represents a race result.

    Scans from the slowest row for the first row strictly faster than the
    supplied time. A current performance reads the row just before it (at
    or slower than the athlete); a goal performance takes the faster row.
    Results faster than every row map to the fastest row.
    """
    if distance not in RACE_DISTANCES_M:
        raise UnsupportedConfigurationError(f"Unknown race distance: {distance}")
    target = parse_race_time(time)
    for idx, row in enumerate(EQUIVALENCE_TABLE):
        if row.times[distance] < target:
            if idx == 0 or goal:
                return row
            return EQUIVALENCE_TABLE[idx - 1]
    return EQUIVALENCE_TABLE[-1]


def race_paces_from_time(distance: str, time: str, goal: bool = False) -> dict[str, float]:
    """Per-mile pace (seconds) at every standard distance for a race result."""
    row = lookup_equivalent_performance(distance, time, goal=goal)
    return {label: row.times[label] / RACE_DISTANCE_MILES[label] for label in RACE_DISTANCES}
