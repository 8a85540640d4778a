"""Typed plan mutation operations.

``PlanOperation`` is a discriminated union on ``type``; field names accept
both the snake_case attribute and the camelCase wire name.
"""

from __future__ import annotations

from datetime import date as dt_date
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from core.schemas import TrainingWorkout

Intensity = Literal["easier", "harder", "skip", "moderate"]


class _Operation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MoveWorkout(_Operation):
    type: Literal["MoveWorkout"] = "MoveWorkout"
    date: dt_date
    to_date: dt_date = Field(alias="toDate")


class ReplaceWorkout(_Operation):
    type: Literal["ReplaceWorkout"] = "ReplaceWorkout"
    date: dt_date
    workout: TrainingWorkout


class ModifyWorkout(_Operation):
    type: Literal["ModifyWorkout"] = "ModifyWorkout"
    date: dt_date
    new_values: dict[str, Any] = Field(alias="newValues")


class InsertWorkout(_Operation):
    type: Literal["InsertWorkout"] = "InsertWorkout"
    date: dt_date
    workout: TrainingWorkout


class DeleteWorkout(_Operation):
    type: Literal["DeleteWorkout"] = "DeleteWorkout"
    date: dt_date


class SwapWorkouts(_Operation):
    type: Literal["SwapWorkouts"] = "SwapWorkouts"
    date: dt_date
    to_date: dt_date = Field(alias="toDate")


class ShiftWeek(_Operation):
    type: Literal["ShiftWeek"] = "ShiftWeek"
    week: int
    delta_days: int = Field(alias="deltaDays")


class AdjustWeekVolume(_Operation):
    type: Literal["AdjustWeekVolume"] = "AdjustWeekVolume"
    week: int
    factor: float = Field(gt=0)


class AdjustIntensity(_Operation):
    type: Literal["AdjustIntensity"] = "AdjustIntensity"
    week: int
    direction: Literal["up", "down"]


class SetPlanProperty(_Operation):
    type: Literal["SetPlanProperty"] = "SetPlanProperty"
    id: Optional[str] = None
    comment: Optional[str] = None
    tags: Optional[list[str]] = None


class AddAnnotation(_Operation):
    type: Literal["AddAnnotation"] = "AddAnnotation"
    date: dt_date
    comment: str


class ExplainWorkout(_Operation):
    type: Literal["ExplainWorkout"] = "ExplainWorkout"
    date: Optional[dt_date] = None
    query: Optional[str] = None


class AdjustWorkoutIntensity(_Operation):
    type: Literal["AdjustWorkoutIntensity"] = "AdjustWorkoutIntensity"
    date: dt_date
    adjustment: Intensity
    reason: str = ""
    user_feedback: str = Field(default="", alias="userFeedback")


class SuggestedModifications(_Operation):
    intensity: Optional[Intensity] = None
    distance: Optional[float] = Field(default=None, ge=0)
    duration: Optional[float] = Field(default=None, ge=0)
    type: Optional[Literal["easy", "recovery", "original"]] = None


class ModifyWorkoutBasedOnFeedback(_Operation):
    type: Literal["ModifyWorkoutBasedOnFeedback"] = "ModifyWorkoutBasedOnFeedback"
    date: dt_date
    user_feedback: str = Field(default="", alias="userFeedback")
    suggested_modifications: SuggestedModifications = Field(
        default_factory=SuggestedModifications, alias="suggestedModifications"
    )


PlanOperation = Annotated[
    Union[
        MoveWorkout,
        ReplaceWorkout,
        ModifyWorkout,
        InsertWorkout,
        DeleteWorkout,
        SwapWorkouts,
        ShiftWeek,
        AdjustWeekVolume,
        AdjustIntensity,
        SetPlanProperty,
        AddAnnotation,
        ExplainWorkout,
        AdjustWorkoutIntensity,
        ModifyWorkoutBasedOnFeedback,
    ],
    Field(discriminator="type"),
]

_OPERATION_LIST = TypeAdapter(list[PlanOperation])


def parse_operations(raw: list[Any]) -> list[PlanOperation]:
    """Validate raw operation dicts; raises pydantic.ValidationError."""
    return _OPERATION_LIST.validate_python(raw)
