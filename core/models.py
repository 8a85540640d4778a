from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class PlanWeekDocument(Base):
    """One plan week stored on its own, addressed by (user_id, week_id)."""

    __tablename__ = "plan_week_documents"
    __table_args__ = (
        UniqueConstraint("user_id", "week_id", name="uq_plan_week_documents_user_week"),
        Index("ix_plan_week_documents_user_week_number", "user_id", "week_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128))
    week_id: Mapped[str] = mapped_column(String(64))
    week_number: Mapped[int] = mapped_column(Integer)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)
    version: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[str] = mapped_column(String(40))
    updated_by: Mapped[str] = mapped_column(String(120))


class PlanDocument(Base):
    """A whole plan in one row with a plan-level version and an append-only changelog."""

    __tablename__ = "plan_documents"
    __table_args__ = (UniqueConstraint("user_id", "plan_id", name="uq_plan_documents_user_plan"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128))
    plan_id: Mapped[str] = mapped_column(String(128))
    weeks: Mapped[list[Any]] = mapped_column(JSON, default=list)
    version: Mapped[int] = mapped_column(Integer, default=0)
    changelog: Mapped[list[Any]] = mapped_column(JSON, default=list)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
    updated_at: Mapped[str | None] = mapped_column(String(40), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
