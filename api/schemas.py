from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from core.schemas import TrainingWeek
from core.services.plan_operations import PlanOperation
from core.validators import AthleteProfile


class HealthOut(BaseModel):
    status: str
    env: str


class SimulateIn(BaseModel):
    weeks: list[TrainingWeek]
    operations: list[PlanOperation] = Field(default_factory=list)


class SimulateOut(BaseModel):
    updated_weeks: list[TrainingWeek]
    changeset: list[dict[str, Any]]
    warnings: list[str]


class PlanOut(BaseModel):
    plan_id: str
    version: int
    weeks: list[TrainingWeek]


class ApplyOperationsIn(BaseModel):
    operations: list[PlanOperation]
    expected_version: int = Field(ge=0)
    mode: Literal["simulate", "apply"] = "apply"
    actor: Optional[str] = None


class ApplyOperationsOut(BaseModel):
    plan_id: str
    to_version: int
    updated_weeks: list[TrainingWeek]
    changeset: list[dict[str, Any]]
    warnings: list[str]


class GenerateWeekIn(BaseModel):
    profile: AthleteProfile
    week: int = Field(ge=1)
    drafts: list[dict[str, Any]] = Field(default_factory=list)
