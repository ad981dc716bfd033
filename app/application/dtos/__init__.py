"""Application DTOs: commands and read models passed across layers."""

from app.application.dtos.schedule import TaskOccurrence
from app.application.dtos.status_time import StatusDuration, TransitionRecord
from app.application.dtos.task import CreateTaskCommand, UpdateTaskCommand
from app.application.dtos.workflow import TransitionCheck, WorkflowDefinitionCommand

__all__ = [
    "CreateTaskCommand",
    "StatusDuration",
    "TaskOccurrence",
    "TransitionCheck",
    "TransitionRecord",
    "UpdateTaskCommand",
    "WorkflowDefinitionCommand",
]
