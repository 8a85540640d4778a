"""Pydantic validation models for athlete-facing plan inputs."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from core.services.planning import WEEKDAYS, count_plan_weeks
from core.services.vdot import RACE_DISTANCES, parse_race_time


class Experience(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class AthleteProfile(BaseModel):
    experience: Experience
    training_days: list[str] = Field(min_length=1, max_length=7)
    num_days_double_threshold: Optional[int] = Field(default=None, ge=0, le=2)
    current_mileage: float = Field(ge=0)
    goal_mileage: float = Field(ge=0)
    current_race_distance: str
    current_race_time: str
    goal_race_distance: str
    goal_race_time: str
    plan_start_date: date
    goal_race_date: date
    num_weeks: Optional[int] = Field(default=None, ge=1)

    @field_validator("experience", mode="before")
    @classmethod
    def normalize_experience(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("training_days")
    @classmethod
    def canonical_weekdays(cls, v):
        normalized = [str(day).strip().title() for day in v]
        unknown = [day for day in normalized if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"training_days must be drawn from {list(WEEKDAYS)}; got {unknown}")
        if len(set(normalized)) != len(normalized):
            raise ValueError("training_days must not repeat a weekday")
        return normalized

    @field_validator("current_race_distance", "goal_race_distance")
    @classmethod
    def valid_distance(cls, v):
        if v not in RACE_DISTANCES:
            raise ValueError(f"race distance must be one of {list(RACE_DISTANCES)}")
        return v

    @field_validator("current_race_time", "goal_race_time")
    @classmethod
    def valid_race_time(cls, v):
        if parse_race_time(v) <= 0:
            raise ValueError("race time must be positive")
        return v

    @model_validator(mode="after")
    def _derive_plan_length(self):
        if self.goal_race_date < self.plan_start_date:
            raise ValueError("goal_race_date must not be before plan_start_date")
        if self.num_weeks is None:
            self.num_weeks = count_plan_weeks(self.plan_start_date, self.goal_race_date)
        return self
