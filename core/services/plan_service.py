"""Orchestration of plan mutation: run operations, then optionally persist."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Optional, Sequence

from core.schemas import TrainingWeek
from core.services.feedback import FeedbackAction, FeedbackClassifier, FeedbackRequest, actions_to_operations, parse_feedback_request
from core.services.plan_operations import ExplainWorkout, PlanOperation
from core.services.plan_ops import run_ops
from core.services.plan_store import AuditRecord, VersionedPlanStore

logger = logging.getLogger(__name__)

Mode = Literal["simulate", "apply"]


@dataclass
class ApplyContext:
    user_id: str
    plan_id: str
    expected_version: int
    actor: str
    now_iso: str


@dataclass
class ApplyResult:
    to_version: int
    updated_weeks: list[TrainingWeek]
    changeset: list[dict]
    warnings: list[str]


def apply_plan_ops(
    weeks: Sequence[TrainingWeek],
    operations: Sequence[PlanOperation],
    context: ApplyContext,
    store: Optional[VersionedPlanStore] = None,
    mode: Mode = "simulate",
) -> ApplyResult:
    """Run ``operations`` over ``weeks`` and, in apply mode, persist the changes.

    Nothing is written when no week changed. Per-week storage only receives
    the changed weeks; a plan document receives the whole plan.
    """
    result = run_ops(weeks, operations)
    to_version = context.expected_version
    if mode == "apply" and result.updated_weeks:
        if store is None:
            raise ValueError("apply mode requires a plan store")
        audit = AuditRecord(
            at_iso=context.now_iso,
            actor=context.actor,
            operations=[op.model_dump(mode="json", by_alias=True) for op in operations],
            changeset=result.changeset,
            warnings=result.warnings,
        )
        to_write = result.updated_weeks if store.is_multi_document(context.plan_id) else result.updated_plan
        saved = store.save_plan(context.user_id, context.plan_id, to_write, context.expected_version, audit)
        to_version = saved.new_version
    elif mode == "apply":
        logger.info("No weeks changed; nothing persisted", extra={"ctx_plan_id": context.plan_id})
    return ApplyResult(
        to_version=to_version,
        updated_weeks=result.updated_weeks,
        changeset=result.changeset,
        warnings=result.warnings,
    )


@dataclass
class FeedbackOutcome:
    request: FeedbackRequest
    operations: list[PlanOperation]
    passthrough: list[FeedbackAction] = field(default_factory=list)
    result: Optional[ApplyResult] = None


def process_feedback(
    message: str,
    classifier: FeedbackClassifier,
    store: VersionedPlanStore,
    user_id: str,
    plan_id: str,
    today: date,
    now_iso: str,
    expected_version: Optional[int] = None,
    actor: str = "feedback",
) -> FeedbackOutcome:
    """Classify a message, map it to operations and apply them to the stored plan.

    Requests that only ask for explanations are simulated, never written.
    """
    request = parse_feedback_request(classifier.classify(message), message)
    mapped = actions_to_operations(request, today)
    stored = store.load_plan(user_id, plan_id)
    context = ApplyContext(
        user_id=user_id,
        plan_id=plan_id,
        expected_version=stored.version if expected_version is None else expected_version,
        actor=actor,
        now_iso=now_iso,
    )
    read_only = all(isinstance(op, ExplainWorkout) for op in mapped.operations)
    result = apply_plan_ops(stored.weeks, mapped.operations, context, store, mode="simulate" if read_only else "apply")
    logger.info(
        "Processed feedback",
        extra={"ctx_intent": request.intent, "ctx_operations": len(mapped.operations), "ctx_read_only": read_only},
    )
    return FeedbackOutcome(
        request=request,
        operations=mapped.operations,
        passthrough=mapped.passthrough,
        result=result,
    )
