"""Task domain entity.

A task is bound to exactly one workflow definition and sits in one of its
statuses. Status changes go through the orchestrator only; every other
field may be edited directly.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime

from app.domain.entities.schedule import DeadlineSchedule, TaskSchedule


@dataclass(frozen=True)
class TaskEntity:
    """Domain entity for a task."""

    id: str
    tenant_id: str
    workflow_id: str
    title: str
    status: str
    description: str | None = None
    assignee_id: str | None = None
    schedule: TaskSchedule | None = None
    due_date: date | None = None
    completed_at: datetime | None = None
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        return self.tenant_id == tenant_id

    def effective_schedule(self) -> TaskSchedule | None:
        """The schedule used on calendars: explicit, else due_date as a deadline."""
        if self.schedule is not None:
            return self.schedule
        if self.due_date is not None:
            return DeadlineSchedule(due_date=self.due_date)
        return None

    def with_status(
        self, status: str, *, at: datetime, completed: bool
    ) -> "TaskEntity":
        """Copy moved to status, version bumped; completed_at tracks terminal statuses."""
        return replace(
            self,
            status=status,
            completed_at=at if completed else None,
            version=self.version + 1,
            updated_at=at,
        )
