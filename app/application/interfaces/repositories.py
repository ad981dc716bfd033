"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
Both the SQLAlchemy and the in-memory backend implement every protocol here.
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Protocol, Self

if TYPE_CHECKING:
    from app.domain.entities.status_time_log import StatusTimeLogEntry
    from app.domain.entities.task import TaskEntity
    from app.domain.entities.workflow import WorkflowDefinition


class IWorkflowDefinitionRepository(Protocol):
    """Protocol for workflow definition storage (DIP)."""

    async def get_by_id(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        """Return the current snapshot of a definition in tenant."""

    async def get_for_share(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        """Return definition and keep it from being replaced until the unit of work ends.

        Status changes and task creation read their workflow this way, so a
        replacement either sees their result or they see the new version.
        """

    async def get_for_update(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        """Return definition under an exclusive lock held until the unit of work ends.

        Raises ConcurrentModificationException when the lock is not acquired
        within the unit of work's lock timeout.
        """

    async def get_default(self, tenant_id: str) -> WorkflowDefinition | None:
        """Return the tenant's default definition, if any."""

    async def list_by_tenant(self, tenant_id: str) -> list[WorkflowDefinition]:
        """Return all definitions in tenant ordered by name."""

    async def add(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Insert a new definition."""

    async def replace(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Swap the stored definition for this one (same id, version + 1).

        Raises ConcurrentModificationException when the stored version is not
        definition.version - 1.
        """

    async def delete(self, definition_id: str, tenant_id: str) -> bool:
        """Delete a definition. Return False if it did not exist."""

    async def clear_default(self, tenant_id: str, except_id: str | None = None) -> None:
        """Unset is_default on every definition in tenant except except_id."""


class ITaskRepository(Protocol):
    """Protocol for task storage (DIP)."""

    async def get_by_id(self, task_id: str, tenant_id: str) -> TaskEntity | None:
        """Return task by ID if it belongs to tenant."""

    async def get_for_update(self, task_id: str, tenant_id: str) -> TaskEntity | None:
        """Return task and hold its exclusive lock until the unit of work ends.

        Raises ConcurrentModificationException when the lock is not acquired
        within the configured timeout.
        """

    async def list_by_tenant(
        self,
        tenant_id: str,
        assignee_id: str | None = None,
        status: str | None = None,
        workflow_id: str | None = None,
    ) -> list[TaskEntity]:
        """Return tasks in tenant matching the optional filters (oldest first)."""

    async def add(self, task: TaskEntity) -> TaskEntity:
        """Insert a new task."""

    async def update(self, task: TaskEntity, expected_version: int) -> TaskEntity:
        """Persist task if the stored version still equals expected_version.

        Raises ConcurrentModificationException on a version mismatch.
        """

    async def delete(self, task_id: str, tenant_id: str) -> bool:
        """Delete a task and its ledger. Return False if it did not exist."""

    async def count_by_workflow(self, tenant_id: str, workflow_id: str) -> int:
        """Return how many tasks are bound to the definition."""

    async def statuses_in_use(self, tenant_id: str, workflow_id: str) -> set[str]:
        """Return distinct statuses held by tasks bound to the definition."""


class IStatusTimeLogRepository(Protocol):
    """Protocol for the append-only status interval ledger (DIP)."""

    async def list_for_task(self, task_id: str) -> list[StatusTimeLogEntry]:
        """Return every entry of the task, ascending by entered_at."""

    async def get_open_entries(self, task_id: str) -> list[StatusTimeLogEntry]:
        """Return the task's open entries (normally at most one)."""

    async def append(self, entry: StatusTimeLogEntry) -> StatusTimeLogEntry:
        """Insert a new entry."""

    async def close(self, entry: StatusTimeLogEntry) -> StatusTimeLogEntry:
        """Persist exited_at/duration_seconds of a closed copy of an open entry.

        Raises ConcurrentModificationException if the stored entry is already closed.
        """


class IUnitOfWork(Protocol):
    """One transaction spanning the three repositories.

    ``async with uow:`` commits on clean exit and rolls back when the block
    raises; nothing is visible to other units of work before commit. Task
    locks taken with get_for_update are released when the block exits.
    """

    workflows: IWorkflowDefinitionRepository
    tasks: ITaskRepository
    status_logs: IStatusTimeLogRepository

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None:
        """Apply staged writes. Raises StorageException on backend failure."""

    async def rollback(self) -> None:
        """Discard staged writes."""
