"""Task API schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.entities.task import TaskEntity
from app.schemas.schedule import ScheduleSchema, schedule_payload


class TaskCreateRequest(BaseModel):
    """Request body for POST /tasks.

    workflow_id defaults to the tenant's default workflow and status to the
    workflow's initial status.
    """

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    workflow_id: str | None = None
    status: str | None = Field(default=None, max_length=64)
    assignee_id: str | None = None
    schedule: ScheduleSchema | None = None
    due_date: date | None = None


class TaskUpdateRequest(BaseModel):
    """Request body for PATCH /tasks/{id} (partial; status is changed via PUT /status)."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    assignee_id: str | None = None


class StatusChangeRequest(BaseModel):
    """Request body for PUT /tasks/{id}/status."""

    status: str = Field(..., min_length=1, max_length=64)
    expected_status: str | None = Field(
        default=None,
        description="Refuse with CONCURRENT_MODIFICATION unless the task is still in this status.",
    )


class TaskResponse(BaseModel):
    """Task response."""

    id: str
    tenant_id: str
    workflow_id: str
    title: str
    description: str | None
    status: str
    assignee_id: str | None
    schedule: dict[str, Any] | None
    due_date: date | None
    completed_at: datetime | None
    version: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_entity(cls, task: TaskEntity) -> "TaskResponse":
        return cls(
            id=task.id,
            tenant_id=task.tenant_id,
            workflow_id=task.workflow_id,
            title=task.title,
            description=task.description,
            status=task.status,
            assignee_id=task.assignee_id,
            schedule=schedule_payload(task.schedule),
            due_date=task.due_date,
            completed_at=task.completed_at,
            version=task.version,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
