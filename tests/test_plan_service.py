"""Tests for simulate/apply orchestration and the feedback flow."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.errors import VersionConflictError
from core.models import Base
from core.schemas import TrainingWeek, TrainingWorkout, WorkoutTag
from core.services.plan_operations import AddAnnotation, AdjustWeekVolume, ExplainWorkout
from core.services.plan_service import ApplyContext, apply_plan_ops, process_feedback
from core.services.plan_store import AuditRecord, VersionedPlanStore

NOW = "2026-10-19T08:00:00+00:00"


@pytest.fixture
def store(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'service.db'}")
    Base.metadata.create_all(engine)
    yield VersionedPlanStore(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


def _week(number):
    start = date(2026, 10, 19) + timedelta(weeks=number - 1)
    workouts = [
        TrainingWorkout(
            name="LT2 intervals",
            date=start + timedelta(days=1),
            day_of_week="Tuesday",
            tags=WorkoutTag.LT2,
            distance=7,
            duration=3600,
        ),
        TrainingWorkout(
            name="Easy Run",
            date=start + timedelta(days=3),
            day_of_week="Thursday",
            tags=WorkoutTag.EASY,
            distance=5,
            duration=2700,
        ),
    ]
    return TrainingWeek(
        id=f"week-{number}",
        week=number,
        start_date=start,
        end_date=start + timedelta(days=6),
        total_mileage=12,
        total_duration=6300,
        workouts=workouts,
    )


def _context(plan_id, version):
    return ApplyContext(user_id="u1", plan_id=plan_id, expected_version=version, actor="coach", now_iso=NOW)


def test_simulate_does_not_persist(store):
    store.create_plan("u1", "spring-10k", [_week(1), _week(2)])
    plan = store.load_plan("u1", "spring-10k")
    result = apply_plan_ops(plan.weeks, [AdjustWeekVolume(week=1, factor=0.5)], _context("spring-10k", 0), store)
    assert result.to_version == 0
    assert [w.week for w in result.updated_weeks] == [1]
    assert store.load_plan("u1", "spring-10k").weeks[0].total_mileage == 12


def test_apply_persists_whole_plan_document(store):
    store.create_plan("u1", "spring-10k", [_week(1), _week(2)])
    plan = store.load_plan("u1", "spring-10k")
    result = apply_plan_ops(
        plan.weeks, [AdjustWeekVolume(week=1, factor=0.5)], _context("spring-10k", 0), store, mode="apply"
    )
    assert result.to_version == 1

    stored = store.load_plan("u1", "spring-10k")
    assert stored.version == 1
    assert [w.total_mileage for w in stored.weeks] == [6, 12]
    entry = store.changelog("u1", "spring-10k")[-1]
    assert entry["actor"] == "coach"
    assert entry["operations"][0]["type"] == "AdjustWeekVolume"
    assert entry["changeset"] == result.changeset


def test_apply_with_stale_version_conflicts(store):
    store.create_plan("u1", "spring-10k", [_week(1)])
    plan = store.load_plan("u1", "spring-10k")
    op = [AdjustWeekVolume(week=1, factor=0.9)]
    apply_plan_ops(plan.weeks, op, _context("spring-10k", 0), store, mode="apply")
    with pytest.raises(VersionConflictError):
        apply_plan_ops(plan.weeks, op, _context("spring-10k", 0), store, mode="apply")


def test_apply_without_changes_writes_nothing(store):
    store.create_plan("u1", "spring-10k", [_week(1)])
    plan = store.load_plan("u1", "spring-10k")
    result = apply_plan_ops(
        plan.weeks, [AddAnnotation(date=date(2026, 12, 1), comment="x")], _context("spring-10k", 0), store, mode="apply"
    )
    assert result.to_version == 0
    assert result.warnings == ["No workout found on 2026-12-01"]
    assert store.load_plan("u1", "spring-10k").version == 0
    assert store.changelog("u1", "spring-10k") == []


def test_apply_writes_only_changed_week_documents(store):
    store.create_plan("u1", "current-plan", [_week(1), _week(2)], audit=AuditRecord(at_iso=NOW, actor="seed"))
    plan = store.load_plan("u1", "current-plan")
    result = apply_plan_ops(
        plan.weeks,
        [AddAnnotation(date=date(2026, 10, 29), comment="Bring gels")],
        _context("current-plan", plan.version),
        store,
        mode="apply",
    )
    assert result.to_version == 2

    stored = store.load_plan("u1", "current-plan")
    assert stored.weeks[1].workouts[1].notes == "Bring gels"
    # week 1 untouched keeps version 1, week 2 bumped to 2
    assert stored.version == 2


def test_apply_requires_store():
    with pytest.raises(ValueError):
        apply_plan_ops([_week(1)], [AdjustWeekVolume(week=1, factor=0.5)], _context("spring-10k", 0), mode="apply")


def test_explain_only_plan_ops_in_apply_mode_do_not_write(store):
    store.create_plan("u1", "spring-10k", [_week(1)])
    plan = store.load_plan("u1", "spring-10k")
    result = apply_plan_ops(
        plan.weeks, [ExplainWorkout(date=date(2026, 10, 20))], _context("spring-10k", 0), store, mode="apply"
    )
    assert result.updated_weeks == []
    assert store.load_plan("u1", "spring-10k").version == 0


class FakeClassifier:
    def __init__(self, payload):
        self.payload = payload
        self.messages = []

    def classify(self, message):
        self.messages.append(message)
        return self.payload


def test_process_feedback_applies_mapped_operations(store):
    store.create_plan("u1", "spring-10k", [_week(1)])
    classifier = FakeClassifier(
        {
            "intent": "modify_plan",
            "context": {"temporal": "today", "physical": "tired"},
            "actions": [
                {"type": "skip_workout", "parameters": {"dayOfWeek": "Tuesday"}, "reasoning": "sick"},
                {"type": "general_advice"},
            ],
        }
    )
    outcome = process_feedback(
        "Feeling ill, skipping Tuesday", classifier, store, "u1", "spring-10k", date(2026, 10, 19), NOW
    )
    assert classifier.messages == ["Feeling ill, skipping Tuesday"]
    assert outcome.request.data_needed == ["today_workout"]
    assert [a.type for a in outcome.passthrough] == ["general_advice"]
    assert outcome.result.to_version == 1

    stored = store.load_plan("u1", "spring-10k")
    skipped = stored.weeks[0].workouts[0]
    assert skipped.name == "Rest Day"
    assert skipped.distance == 0
    assert stored.weeks[0].total_mileage == 5


def test_process_feedback_explanations_are_read_only(store):
    store.create_plan("u1", "spring-10k", [_week(1)])
    classifier = FakeClassifier(
        {"intent": "question", "actions": [{"type": "explain_workout", "parameters": {"date": "2026-10-20"}}]}
    )
    outcome = process_feedback("Why LT2?", classifier, store, "u1", "spring-10k", date(2026, 10, 19), NOW)
    assert isinstance(outcome.operations[0], ExplainWorkout)
    assert outcome.result.to_version == 0
    assert store.load_plan("u1", "spring-10k").version == 0
