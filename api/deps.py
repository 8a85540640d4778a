from __future__ import annotations

from core.config import get_settings
from core.db import get_session_factory
from core.services.plan_store import VersionedPlanStore


def get_plan_store() -> VersionedPlanStore:
    return VersionedPlanStore(get_session_factory(), get_settings().current_plan_ids)
