"""Domain layer: entities, value objects, enums, events and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    StatusDefinition,
    StatusTimeLogEntry,
    TaskEntity,
    TransitionRule,
    WorkflowDefinition,
)
from app.domain.enums import RejectionCode, ScheduleType
from app.domain.events import StatusChangedEvent
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConcurrentModificationException,
    OrphanedStatusException,
    RejectionException,
    ResourceNotFoundException,
    StorageException,
    TaskflowException,
    ValidationException,
)
from app.domain.value_objects import Admitted, Occurrence, Rejection

__all__ = [
    # Entities
    "StatusDefinition",
    "StatusTimeLogEntry",
    "TaskEntity",
    "TransitionRule",
    "WorkflowDefinition",
    # Enums
    "RejectionCode",
    "ScheduleType",
    # Events
    "StatusChangedEvent",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "ConcurrentModificationException",
    "OrphanedStatusException",
    "RejectionException",
    "ResourceNotFoundException",
    "StorageException",
    "TaskflowException",
    "ValidationException",
    # Value objects
    "Admitted",
    "Occurrence",
    "Rejection",
]
