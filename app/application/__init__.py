"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, unit of work, publishers).
"""

from app.application.interfaces import (
    IStatusChangePublisher,
    IStatusTimeLogRepository,
    ITaskRepository,
    IUnitOfWork,
    IWorkflowDefinitionRepository,
)
from app.application.services import (
    ScheduleProjector,
    StatusTimeTracker,
    TransitionValidator,
)
from app.application.use_cases import (
    ScheduleQueryService,
    StatusTimeQueryService,
    TaskService,
    WorkflowDefinitionService,
    WorkflowOrchestrator,
)

__all__ = [
    "IStatusChangePublisher",
    "IStatusTimeLogRepository",
    "ITaskRepository",
    "IUnitOfWork",
    "IWorkflowDefinitionRepository",
    "ScheduleProjector",
    "ScheduleQueryService",
    "StatusTimeQueryService",
    "StatusTimeTracker",
    "TaskService",
    "TransitionValidator",
    "WorkflowDefinitionService",
    "WorkflowOrchestrator",
]
