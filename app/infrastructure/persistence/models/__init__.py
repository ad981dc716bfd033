"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    TimestampMixin,
    VersionedMixin,
)
from app.infrastructure.persistence.models.status_time_log import StatusTimeLog
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.models.workflow_definition import (
    WorkflowDefinitionModel,
)

__all__ = [
    "StatusTimeLog",
    "Task",
    "WorkflowDefinitionModel",
    "CuidMixin",
    "TenantMixin",
    "TimestampMixin",
    "VersionedMixin",
    "MultiTenantModel",
]
