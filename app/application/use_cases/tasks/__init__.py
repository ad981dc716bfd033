"""Task use cases: status changes and task lifecycle."""

from app.application.use_cases.tasks.change_status import (
    WorkflowOrchestrator,
    publish_quietly,
)
from app.application.use_cases.tasks.task_operations import TaskService

__all__ = ["TaskService", "WorkflowOrchestrator", "publish_quietly"]
