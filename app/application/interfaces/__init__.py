"""Application ports: repository, unit-of-work and publisher protocols."""

from app.application.interfaces.repositories import (
    IStatusTimeLogRepository,
    ITaskRepository,
    IUnitOfWork,
    IWorkflowDefinitionRepository,
)
from app.application.interfaces.services import (
    IStatusChangePublisher,
    UnitOfWorkFactory,
)

__all__ = [
    "IStatusChangePublisher",
    "IStatusTimeLogRepository",
    "ITaskRepository",
    "IUnitOfWork",
    "IWorkflowDefinitionRepository",
    "UnitOfWorkFactory",
]
