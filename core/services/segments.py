"""Distance/duration evaluation of structured workout segments."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from core.schemas import PaceEntry, RestSegment, WorkoutSet
from core.services.training_paces import TrainingPaces

METERS_PER_MILE = 1609


@dataclass(frozen=True)
class SegmentTotals:
    distance: float = 0.0  # miles
    duration: float = 0.0  # seconds

    def __add__(self, other: "SegmentTotals") -> "SegmentTotals":
        return SegmentTotals(self.distance + other.distance, self.duration + other.duration)

    def rounded(self) -> "SegmentTotals":
        """Distance to the nearest half mile, duration up to the next 5 minutes."""
        return SegmentTotals(
            distance=math.floor(self.distance / 0.5 + 0.5) * 0.5,
            duration=math.ceil(self.duration / 300) * 300,
        )


def _leg(segment: WorkoutSet, pace: float) -> tuple[float, float]:
    if segment.length.type == "time":
        return segment.length.amount / pace, segment.length.amount
    miles = segment.length.amount / METERS_PER_MILE
    return miles, miles * pace


def evaluate_segments(segments: Optional[Iterable], paces: TrainingPaces) -> SegmentTotals:
    """Total miles and seconds covered by a segment list.

    Rests contribute duration only. A set contributes ``reps`` legs, each
    followed by its ``rest`` (the final rep included).
    """
    if not segments:
        return SegmentTotals()
    distance = 0.0
    duration = 0.0
    for segment in segments:
        if isinstance(segment, RestSegment):
            duration += segment.seconds
            continue
        reps = segment.reps or 1
        leg_miles, leg_seconds = _leg(segment, paces.pace_value(segment.type))
        distance += leg_miles * reps
        duration += (leg_seconds + (segment.rest or 0)) * reps
    return SegmentTotals(distance=distance, duration=duration)


def extract_pace_entries(segments: Optional[Iterable], paces: TrainingPaces) -> list[PaceEntry]:
    """Distinct (zone, pace) pairs referenced by the sets, in first-seen order."""
    entries: list[PaceEntry] = []
    if not segments:
        return entries
    for segment in segments:
        if not isinstance(segment, WorkoutSet):
            continue
        entry = PaceEntry(zone=segment.type, pace=paces.pace_for(segment.type))
        if entry not in entries:
            entries.append(entry)
    return entries
