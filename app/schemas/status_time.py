"""Status-time accounting API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StatusDurationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    total_seconds: int
    visit_count: int
    is_current: bool


class StatusSummaryResponse(BaseModel):
    """Response for GET /tasks/{id}/status-summary."""

    task_id: str
    as_of: datetime
    totals: dict[str, int] = Field(..., description="Seconds spent per status")
    statuses: list[StatusDurationResponse]


class StatusTimelineEntryResponse(BaseModel):
    """One interval of the status ledger."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    from_status: str | None
    to_status: str
    entered_at: datetime
    exited_at: datetime | None
    duration_seconds: int | None
    actor_id: str | None


class StatusTimelineResponse(BaseModel):
    task_id: str
    entries: list[StatusTimelineEntryResponse]
