"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.schedule import (
    CalendarEntryResponse,
    OccurrenceResponse,
    OccurrencesRequest,
    ScheduleSchema,
    ScheduleUpdateRequest,
)
from app.schemas.status_time import (
    StatusDurationResponse,
    StatusSummaryResponse,
    StatusTimelineEntryResponse,
    StatusTimelineResponse,
)
from app.schemas.task import (
    StatusChangeRequest,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from app.schemas.websocket import WebSocketStatusResponse
from app.schemas.workflow import (
    AllowedTransitionsResponse,
    ValidateTransitionRequest,
    ValidateTransitionResponse,
    WorkflowDefinitionRequest,
    WorkflowDefinitionResponse,
    WorkflowReplaceRequest,
)

__all__ = [
    "AllowedTransitionsResponse",
    "CalendarEntryResponse",
    "HealthResponse",
    "OccurrenceResponse",
    "OccurrencesRequest",
    "ReadinessResponse",
    "ScheduleSchema",
    "ScheduleUpdateRequest",
    "StatusChangeRequest",
    "StatusDurationResponse",
    "StatusSummaryResponse",
    "StatusTimelineEntryResponse",
    "StatusTimelineResponse",
    "TaskCreateRequest",
    "TaskResponse",
    "TaskUpdateRequest",
    "ValidateTransitionRequest",
    "ValidateTransitionResponse",
    "WebSocketStatusResponse",
    "WorkflowDefinitionRequest",
    "WorkflowDefinitionResponse",
    "WorkflowReplaceRequest",
]
