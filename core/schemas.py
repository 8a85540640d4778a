"""Plan data model shared by the generation and mutation engines."""

from __future__ import annotations

from datetime import date as dt_date
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

TRAINING_ZONE_NAMES = ("1500", "Mile", "3K", "5K", "10K", "Half Marathon", "Marathon", "LT1", "LT2", "Easy", "Hills")

TrainingZone = Literal["1500", "Mile", "3K", "5K", "10K", "Half Marathon", "Marathon", "LT1", "LT2", "Easy", "Hills"]


class WorkoutTag(str, Enum):
    LT1 = "LT1"
    LT2 = "LT2"
    HILLS = "Hills"
    MEDIUM_LONG_RUN = "MediumLongRun"
    LONG_RUN = "LongRun"
    EASY = "Easy"
    VO2_MAX = "VO2Max"
    RACE_SPECIFIC = "RaceSpecific"
    SPEED = "Speed"
    CROSSTRAIN = "Crosstrain"
    OFF = "Off"


class SegmentLength(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: float = Field(gt=0)
    type: Literal["distance", "time"]


class RestSegment(BaseModel):
    kind: Literal["rest"] = "rest"
    seconds: float = Field(ge=0)


class WorkoutSet(BaseModel):
    kind: Literal["set"] = "set"
    type: TrainingZone
    reps: Optional[int] = Field(default=None, ge=1)
    length: SegmentLength
    rest: Optional[float] = Field(default=None, ge=0)


def _tag_segment(value: Any) -> Any:
    # Drafts send rests as bare numbers and sets as untagged objects.
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return {"kind": "rest", "seconds": value}
    if isinstance(value, dict) and "kind" not in value:
        if set(value) == {"rest"}:
            return {"kind": "rest", "seconds": value["rest"]}
        return {"kind": "set", **value}
    return value


WorkoutSegment = Annotated[Union[RestSegment, WorkoutSet], BeforeValidator(_tag_segment)]


class PaceEntry(BaseModel):
    zone: str
    pace: Union[float, tuple[float, float]]


class TrainingWorkout(BaseModel):
    name: str = Field(min_length=1)
    date: dt_date
    day_of_week: str
    tags: WorkoutTag
    workout: Optional[list[WorkoutSegment]] = None
    warmup: Optional[list[WorkoutSegment]] = None
    cooldown: Optional[str] = None
    distance: float = Field(default=0, ge=0)
    duration: float = Field(default=0, ge=0)
    target_heart_rate: Optional[str] = None
    target_pace: list[PaceEntry] = Field(default_factory=list)
    notes: Optional[str] = None


class TrainingWeek(BaseModel):
    id: str
    week: int = Field(ge=1)
    start_date: dt_date
    end_date: dt_date
    total_mileage: float = 0
    total_duration: float = 0
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    workouts: list[TrainingWorkout] = Field(default_factory=list)

    def contains(self, day: dt_date) -> bool:
        return self.start_date <= day <= self.end_date
