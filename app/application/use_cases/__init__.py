"""Application use cases: one entry point per workflow."""

from app.application.use_cases.schedules import ScheduleQueryService
from app.application.use_cases.status_time import StatusTimeQueryService
from app.application.use_cases.tasks import TaskService, WorkflowOrchestrator
from app.application.use_cases.workflows import WorkflowDefinitionService

__all__ = [
    "ScheduleQueryService",
    "StatusTimeQueryService",
    "TaskService",
    "WorkflowDefinitionService",
    "WorkflowOrchestrator",
]
