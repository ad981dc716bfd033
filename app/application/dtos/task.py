"""Commands for task use cases (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from app.domain.entities.schedule import TaskSchedule


@dataclass(frozen=True)
class CreateTaskCommand:
    """Input for TaskService.create_task.

    workflow_id None binds the tenant default; status None starts the task in
    the definition's initial status.
    """

    title: str
    description: str | None = None
    workflow_id: str | None = None
    status: str | None = None
    assignee_id: str | None = None
    schedule: TaskSchedule | None = None
    due_date: date | None = None


@dataclass(frozen=True)
class UpdateTaskCommand:
    """Editable task details; None leaves a field unchanged."""

    title: str | None = None
    description: str | None = None
    assignee_id: str | None = None
