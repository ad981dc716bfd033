"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.status_time_log_repo import (
    StatusTimeLogRepository,
)
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.workflow_definition_repo import (
    WorkflowDefinitionRepository,
)

__all__ = [
    "BaseRepository",
    "StatusTimeLogRepository",
    "TaskRepository",
    "WorkflowDefinitionRepository",
]
