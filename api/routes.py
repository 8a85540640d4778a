from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_plan_store
from api.schemas import (
    ApplyOperationsIn,
    ApplyOperationsOut,
    GenerateWeekIn,
    HealthOut,
    PlanOut,
    SimulateIn,
    SimulateOut,
)
from core.config import get_settings
from core.logging_config import bind_log_context, reset_log_context
from core.schemas import TrainingWeek
from core.services.key_workouts import validate_drafts
from core.services.plan_ops import run_ops
from core.services.plan_service import ApplyContext, apply_plan_ops
from core.services.plan_store import VersionedPlanStore
from core.services.week_builder import assemble_week

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


@router.get("/health", response_model=HealthOut, tags=["system"])
def health():
    return HealthOut(status="ok", env=get_settings().app_env)


@router.post("/plans/simulate", response_model=SimulateOut, tags=["plans"])
def simulate(body: SimulateIn):
    result = run_ops(body.weeks, body.operations)
    return SimulateOut(updated_weeks=result.updated_weeks, changeset=result.changeset, warnings=result.warnings)


@router.get("/users/{user_id}/plans/{plan_id}", response_model=PlanOut, tags=["plans"])
def get_plan(user_id: str, plan_id: str, store: Annotated[VersionedPlanStore, Depends(get_plan_store)]):
    stored = store.load_plan(user_id, plan_id)
    return PlanOut(plan_id=stored.plan_id, version=stored.version, weeks=stored.weeks)


@router.post("/users/{user_id}/plans/{plan_id}/operations", response_model=ApplyOperationsOut, tags=["plans"])
def apply_operations(
    user_id: str,
    plan_id: str,
    body: ApplyOperationsIn,
    store: Annotated[VersionedPlanStore, Depends(get_plan_store)],
):
    context = ApplyContext(
        user_id=user_id,
        plan_id=plan_id,
        expected_version=body.expected_version,
        actor=body.actor or get_settings().default_actor,
        now_iso=datetime.now(timezone.utc).isoformat(),
    )
    token = bind_log_context(user_id=user_id, plan_id=plan_id)
    try:
        stored = store.load_plan(user_id, plan_id)
        result = apply_plan_ops(stored.weeks, body.operations, context, store, mode=body.mode)
    finally:
        reset_log_context(token)
    return ApplyOperationsOut(
        plan_id=plan_id,
        to_version=result.to_version,
        updated_weeks=result.updated_weeks,
        changeset=result.changeset,
        warnings=result.warnings,
    )


@router.post("/plan-weeks", response_model=TrainingWeek, tags=["generation"])
def generate_week(body: GenerateWeekIn):
    if body.week > body.profile.num_weeks:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"week must be within 1..{body.profile.num_weeks}",
        )
    drafts = validate_drafts(body.drafts)
    return assemble_week(body.profile, body.week, drafts)
