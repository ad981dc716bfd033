"""Task ORM model. A unit of work bound to one workflow definition."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import MultiTenantModel


class Task(MultiTenantModel, Base):
    """Task. Table: task. status must be a node of the bound workflow_definition."""

    __tablename__ = "task"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow_definition.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(64), nullable=False)
    assignee_id: Mapped[str | None] = mapped_column(String, nullable=True)
    schedule: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_task_tenant_assignee", "tenant_id", "assignee_id"),
        Index("ix_task_tenant_status", "tenant_id", "status"),
    )
