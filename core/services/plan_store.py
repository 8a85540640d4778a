"""Versioned persistence of training plans.

Two layouts share one interface:

- per-week documents, selected by the virtual "current plan" ids. Each
  week is upserted on its own (INSERT ... ON CONFLICT where the database
  supports it) with its own version counter and concurrent
  writers to the same week race (last write wins). The returned version is
  ``expected_version + 1`` by convention only.
- a single plan document for any other plan id. Saves are an atomic
  read-compare-write guarded by the stored version; the loser of a race
  gets ``VersionConflictError``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from core.errors import PlanNotFoundError, VersionConflictError
from core.models import PlanDocument, PlanWeekDocument
from core.schemas import TrainingWeek

logger = logging.getLogger(__name__)

CURRENT_PLAN_IDS = ("current-plan", "default")

# Dialects with INSERT ... ON CONFLICT DO UPDATE; others upsert through the ORM
_UPSERT_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


@dataclass
class AuditRecord:
    at_iso: str
    actor: str
    operations: list[Any] = field(default_factory=list)
    changeset: list[Any] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SaveResult:
    new_version: int


@dataclass
class StoredPlan:
    plan_id: str
    version: int
    weeks: list[TrainingWeek]


def _dump_weeks(weeks: Iterable[TrainingWeek]) -> list[dict[str, Any]]:
    return [week.model_dump(mode="json") for week in weeks]


class VersionedPlanStore:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        current_plan_ids: Iterable[str] = CURRENT_PLAN_IDS,
    ):
        self._session_factory = session_factory
        self.current_plan_ids = frozenset(current_plan_ids)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def is_multi_document(self, plan_id: str) -> bool:
        return plan_id in self.current_plan_ids

    def save_plan(
        self,
        user_id: str,
        plan_id: str,
        weeks: Sequence[TrainingWeek],
        expected_version: int,
        audit: AuditRecord,
    ) -> SaveResult:
        if self.is_multi_document(plan_id):
            return self._save_weeks(user_id, weeks, expected_version, audit)
        return self._save_document(user_id, plan_id, weeks, expected_version, audit)

    def _save_weeks(
        self,
        user_id: str,
        weeks: Sequence[TrainingWeek],
        expected_version: int,
        audit: AuditRecord,
    ) -> SaveResult:
        with self._session() as session:
            insert = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
            for week in weeks:
                values = {
                    "user_id": user_id,
                    "week_id": week.id or f"week-{week.week}",
                    "week_number": week.week,
                    "payload": week.model_dump(mode="json"),
                    "updated_at": audit.at_iso,
                    "updated_by": audit.actor,
                }
                if insert is None:
                    self._upsert_week_row(session, values)
                    continue
                stmt = insert(PlanWeekDocument).values(version=1, **values)
                session.execute(
                    stmt.on_conflict_do_update(
                        index_elements=["user_id", "week_id"],
                        set_={
                            "week_number": stmt.excluded.week_number,
                            "payload": stmt.excluded.payload,
                            "version": PlanWeekDocument.__table__.c.version + 1,
                            "updated_at": stmt.excluded.updated_at,
                            "updated_by": stmt.excluded.updated_by,
                        },
                    )
                )
        logger.info(
            "Saved plan weeks",
            extra={"ctx_user_id": user_id, "ctx_weeks": [w.week for w in weeks], "ctx_actor": audit.actor},
        )
        return SaveResult(new_version=expected_version + 1)

    @staticmethod
    def _upsert_week_row(session: Session, values: dict[str, Any]) -> None:
        row = session.execute(
            select(PlanWeekDocument).where(
                PlanWeekDocument.user_id == values["user_id"],
                PlanWeekDocument.week_id == values["week_id"],
            )
        ).scalar_one_or_none()
        if row is None:
            session.add(PlanWeekDocument(version=1, **values))
            return
        for key, value in values.items():
            setattr(row, key, value)
        row.version = row.version + 1

    def _save_document(
        self,
        user_id: str,
        plan_id: str,
        weeks: Sequence[TrainingWeek],
        expected_version: int,
        audit: AuditRecord,
    ) -> SaveResult:
        with self._session() as session:
            row = session.execute(
                select(PlanDocument)
                .where(PlanDocument.user_id == user_id, PlanDocument.plan_id == plan_id)
                .with_for_update()
            ).scalar_one_or_none()
            if row is None:
                raise PlanNotFoundError(user_id, plan_id)
            if row.version != expected_version:
                raise VersionConflictError(plan_id, expected_version, row.version)
            result = session.execute(
                update(PlanDocument)
                .where(PlanDocument.id == row.id, PlanDocument.version == expected_version)
                .values(
                    weeks=_dump_weeks(weeks),
                    version=expected_version + 1,
                    changelog=[*(row.changelog or []), audit.as_dict()],
                    updated_at=audit.at_iso,
                    updated_by=audit.actor,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise VersionConflictError(plan_id, expected_version, None)
        logger.info(
            "Saved plan document",
            extra={"ctx_plan_id": plan_id, "ctx_version": expected_version + 1, "ctx_actor": audit.actor},
        )
        return SaveResult(new_version=expected_version + 1)

    def create_plan(
        self,
        user_id: str,
        plan_id: str,
        weeks: Sequence[TrainingWeek],
        audit: Optional[AuditRecord] = None,
    ) -> StoredPlan:
        """Store a new plan at version 0 (per-week ids are written at version 1)."""
        if self.is_multi_document(plan_id):
            if audit is None:
                raise ValueError("an audit record is required to write week documents")
            self._save_weeks(user_id, weeks, 0, audit)
            return self.load_plan(user_id, plan_id)
        with self._session() as session:
            session.add(
                PlanDocument(
                    user_id=user_id,
                    plan_id=plan_id,
                    weeks=_dump_weeks(weeks),
                    version=0,
                    changelog=[audit.as_dict()] if audit else [],
                    updated_at=audit.at_iso if audit else None,
                    updated_by=audit.actor if audit else None,
                )
            )
        return StoredPlan(plan_id=plan_id, version=0, weeks=list(weeks))

    def load_plan(self, user_id: str, plan_id: str) -> StoredPlan:
        with self._session() as session:
            if self.is_multi_document(plan_id):
                rows = session.execute(
                    select(PlanWeekDocument)
                    .where(PlanWeekDocument.user_id == user_id)
                    .order_by(PlanWeekDocument.week_number, PlanWeekDocument.version)
                ).scalars().all()
                if not rows:
                    raise PlanNotFoundError(user_id, plan_id)
                weeks = [TrainingWeek.model_validate(row.payload) for row in rows]
                return StoredPlan(plan_id=plan_id, version=max(row.version for row in rows), weeks=weeks)

            row = session.execute(
                select(PlanDocument).where(PlanDocument.user_id == user_id, PlanDocument.plan_id == plan_id)
            ).scalar_one_or_none()
            if row is None:
                raise PlanNotFoundError(user_id, plan_id)
            weeks = [TrainingWeek.model_validate(item) for item in row.weeks or []]
            return StoredPlan(plan_id=plan_id, version=row.version, weeks=weeks)

    def changelog(self, user_id: str, plan_id: str) -> list[dict[str, Any]]:
        with self._session() as session:
            row = session.execute(
                select(PlanDocument).where(PlanDocument.user_id == user_id, PlanDocument.plan_id == plan_id)
            ).scalar_one_or_none()
            if row is None:
                raise PlanNotFoundError(user_id, plan_id)
            return list(row.changelog or [])
