"""Maps classified athlete feedback onto plan operations.

The classifier (an LLM in production) turns a free-text message into a
``FeedbackRequest``. Only the mapping from recognised action types to
operations lives here; it never reads the clock, callers pass ``today``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import InvalidPlanFormatError
from core.services.plan_operations import (
    AdjustWorkoutIntensity,
    ExplainWorkout,
    ModifyWorkoutBasedOnFeedback,
    PlanOperation,
    SuggestedModifications,
)
from core.services.planning import WEEKDAYS

logger = logging.getLogger(__name__)

DataNeed = Literal["today_workout", "recent_training_load", "user_preferences", "training_history", "recovery_patterns"]


class FeedbackContext(BaseModel):
    temporal: Optional[Literal["today", "yesterday", "this_week", "future", "past"]] = None
    physical: Optional[Literal["tired", "sore", "energized", "normal", "injured"]] = None
    mental: Optional[Literal["motivated", "unmotivated", "stressed", "focused", "confused"]] = None
    training: Optional[Literal["base", "build", "peak", "recovery", "taper"]] = None


class ActionParameters(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    intensity: Optional[Literal["easier", "harder", "skip", "moderate"]] = None
    date: Optional[str] = None
    day_of_week: Optional[str] = Field(default=None, alias="dayOfWeek")
    distance: Optional[float] = None
    duration: Optional[float] = None


class FeedbackAction(BaseModel):
    type: str
    parameters: ActionParameters = Field(default_factory=ActionParameters)
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0, le=1)

    def names_a_day(self) -> bool:
        return bool(self.parameters.date or self.parameters.day_of_week)


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    intent: str
    context: FeedbackContext = Field(default_factory=FeedbackContext)
    data_needed: list[DataNeed] = Field(default_factory=list, alias="dataNeeded")
    actions: list[FeedbackAction] = Field(default_factory=list)
    original_message: Optional[str] = Field(default=None, alias="originalMessage")


class FeedbackClassifier(Protocol):
    def classify(self, message: str) -> dict:
        ...


def parse_feedback_request(payload: Any, message: Optional[str] = None) -> FeedbackRequest:
    """Validate a classifier response.

    Day-specific actions need the addressed workout, so ``today_workout``
    is added to ``data_needed`` whenever an action names a date or weekday.
    """
    try:
        request = FeedbackRequest.model_validate(payload)
    except ValidationError as exc:
        errors = [f"{'/'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise InvalidPlanFormatError("Feedback classification does not match the request schema", errors) from exc
    if any(action.names_a_day() for action in request.actions) and "today_workout" not in request.data_needed:
        request.data_needed.append("today_workout")
    if message is not None:
        request.original_message = message
    return request


def next_weekday(day_name: str, today: date) -> Optional[date]:
    """Next date (today inclusive) falling on ``day_name``; None for unknown names."""
    name = day_name.strip().title()
    if name not in WEEKDAYS:
        return None
    return today + timedelta(days=(WEEKDAYS.index(name) - today.weekday()) % 7)


def resolve_action_date(action: FeedbackAction, today: date) -> date:
    params = action.parameters
    if params.date:
        try:
            return date.fromisoformat(params.date[:10])
        except ValueError:
            logger.warning("Ignoring unparseable action date", extra={"ctx_date": params.date})
    if params.day_of_week:
        resolved = next_weekday(params.day_of_week, today)
        if resolved is not None:
            return resolved
    return today


@dataclass
class MappedActions:
    operations: list[PlanOperation] = field(default_factory=list)
    passthrough: list[FeedbackAction] = field(default_factory=list)


def actions_to_operations(request: FeedbackRequest, today: date) -> MappedActions:
    """Translate recognised actions; anything else is passed through untouched."""
    mapped = MappedActions()
    feedback = request.original_message or ""
    for action in request.actions:
        when = resolve_action_date(action, today)
        if action.type == "adjust_workout_intensity":
            mapped.operations.append(
                AdjustWorkoutIntensity(
                    date=when,
                    adjustment=action.parameters.intensity or "moderate",
                    reason=action.reasoning,
                    user_feedback=feedback,
                )
            )
        elif action.type == "skip_workout":
            mapped.operations.append(
                AdjustWorkoutIntensity(date=when, adjustment="skip", reason=action.reasoning, user_feedback=feedback)
            )
        elif action.type == "add_recovery":
            mapped.operations.append(
                ModifyWorkoutBasedOnFeedback(
                    date=when,
                    user_feedback=feedback,
                    suggested_modifications=SuggestedModifications(type="recovery", intensity="easier"),
                )
            )
        elif action.type == "explain_workout":
            mapped.operations.append(ExplainWorkout(date=when, query=feedback or None))
        else:
            mapped.passthrough.append(action)
    if mapped.passthrough:
        logger.info(
            "Unrecognised feedback actions passed through",
            extra={"ctx_types": [a.type for a in mapped.passthrough]},
        )
    return mapped
