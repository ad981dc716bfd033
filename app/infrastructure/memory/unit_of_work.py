"""In-memory unit of work and repositories.

Writes are staged on the unit of work and applied to the store at commit;
an exception inside ``async with`` discards them. get_for_update takes the
task's asyncio.Lock (bounded by lock_timeout_seconds) and holds it until
the block exits, matching SELECT ... FOR UPDATE on Postgres.

Workflow reads taken for share or update are optimistic instead: commit
fails if the definition changed since it was read, and no staged
definition may drop a status that a bound task still holds.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from types import TracebackType
from typing import Self

from app.domain.entities.status_time_log import StatusTimeLogEntry
from app.domain.entities.task import TaskEntity
from app.domain.entities.workflow import WorkflowDefinition
from app.domain.exceptions import ConcurrentModificationException
from app.infrastructure.memory.store import InMemoryStore

logger = logging.getLogger(__name__)


def _overlay[T](committed: dict[str, T], staged: dict[str, T | None]) -> dict[str, T]:
    """Committed rows with staged writes applied; None in staged means deleted."""
    merged = dict(committed)
    for key, value in staged.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class MemoryUnitOfWork:
    """Implements IUnitOfWork over an InMemoryStore."""

    def __init__(self, store: InMemoryStore, lock_timeout_seconds: float) -> None:
        self.store = store
        self.lock_timeout = lock_timeout_seconds
        self.staged_workflows: dict[str, WorkflowDefinition | None] = {}
        self.staged_tasks: dict[str, TaskEntity | None] = {}
        self.staged_logs: dict[str, StatusTimeLogEntry] = {}
        # Version each staged write expects to find committed at commit time.
        self.expected_task_versions: dict[str, int] = {}
        self.expected_workflow_versions: dict[str, int] = {}
        self._held: dict[str, asyncio.Lock] = {}
        self._deleted_task_ids: list[str] = []
        self.workflows = MemoryWorkflowDefinitionRepository(self)
        self.tasks = MemoryTaskRepository(self)
        self.status_logs = MemoryStatusTimeLogRepository(self)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            self._release_locks()

    async def acquire_task_lock(self, task_id: str) -> None:
        """Take the task's lock for the rest of this unit of work.

        Raises ConcurrentModificationException after lock_timeout seconds.
        """
        if task_id in self._held:
            return
        lock = self.store.task_lock(task_id)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.lock_timeout)
        except TimeoutError as e:
            logger.info("Lock wait on task %s timed out", task_id)
            raise ConcurrentModificationException(task_id, "lock timeout") from e
        self._held[task_id] = lock

    def _release_locks(self) -> None:
        for lock in self._held.values():
            lock.release()
        self._held.clear()
        for task_id in self._deleted_task_ids:
            self.store.forget_lock(task_id)
        self._deleted_task_ids.clear()

    def current_workflows(self) -> dict[str, WorkflowDefinition]:
        return _overlay(self.store.workflows, self.staged_workflows)

    def current_tasks(self) -> dict[str, TaskEntity]:
        return _overlay(self.store.tasks, self.staged_tasks)

    def current_logs(self) -> dict[str, StatusTimeLogEntry]:
        live_tasks = self.current_tasks()
        merged = {**self.store.status_logs, **self.staged_logs}
        return {k: v for k, v in merged.items() if v.task_id in live_tasks}

    def _check_conflicts(self) -> None:
        for task_id, expected in self.expected_task_versions.items():
            committed = self.store.tasks.get(task_id)
            if committed is None or committed.version != expected:
                raise ConcurrentModificationException(task_id, "version mismatch")
        for definition_id, expected in self.expected_workflow_versions.items():
            definition = self.store.workflows.get(definition_id)
            if definition is None or definition.version != expected:
                raise ConcurrentModificationException(definition_id, "version mismatch")
        if self.staged_workflows:
            tasks = self.current_tasks().values()
            for definition_id, definition in self.staged_workflows.items():
                for task in tasks:
                    if task.workflow_id != definition_id:
                        continue
                    if definition is None:
                        raise ConcurrentModificationException(
                            definition_id, "workflow is still bound to tasks"
                        )
                    if not definition.has_status(task.status):
                        raise ConcurrentModificationException(
                            definition_id, f"status '{task.status}' is still in use"
                        )
        for entry_id, entry in self.staged_logs.items():
            committed_entry = self.store.status_logs.get(entry_id)
            if committed_entry is not None and not committed_entry.is_open:
                raise ConcurrentModificationException(
                    entry.task_id, "log entry already closed"
                )
        open_per_task: dict[str, int] = {}
        for entry in self.current_logs().values():
            if entry.is_open:
                open_per_task[entry.task_id] = open_per_task.get(entry.task_id, 0) + 1
        for task_id, count in open_per_task.items():
            if count > 1:
                raise ConcurrentModificationException(
                    task_id, "more than one open log entry"
                )

    async def commit(self) -> None:
        """Check staged writes against committed state, then apply all of them.

        Runs without awaiting between check and apply, so the commit is atomic
        with respect to other coroutines.
        """
        self._check_conflicts()
        store = self.store
        store.workflows = _overlay(store.workflows, self.staged_workflows)
        deleted = {key for key, task in self.staged_tasks.items() if task is None}
        store.tasks = _overlay(store.tasks, self.staged_tasks)
        store.status_logs.update(self.staged_logs)
        if deleted:
            store.status_logs = {
                k: v for k, v in store.status_logs.items() if v.task_id not in deleted
            }
            self._deleted_task_ids.extend(deleted)
        self._reset()

    async def rollback(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self.staged_workflows.clear()
        self.staged_tasks.clear()
        self.staged_logs.clear()
        self.expected_task_versions.clear()
        self.expected_workflow_versions.clear()


class MemoryWorkflowDefinitionRepository:
    """Implements IWorkflowDefinitionRepository on a MemoryUnitOfWork."""

    def __init__(self, uow: MemoryUnitOfWork) -> None:
        self.uow = uow

    async def get_by_id(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        definition = self.uow.current_workflows().get(definition_id)
        if definition is None or not definition.belongs_to_tenant(tenant_id):
            return None
        return definition

    async def get_for_share(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        definition = await self.get_by_id(definition_id, tenant_id)
        if definition is not None:
            self._expect_committed_version(definition_id)
        return definition

    async def get_for_update(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        return await self.get_for_share(definition_id, tenant_id)

    def _expect_committed_version(self, definition_id: str) -> None:
        committed = self.uow.store.workflows.get(definition_id)
        if committed is not None:
            self.uow.expected_workflow_versions.setdefault(
                definition_id, committed.version
            )

    async def get_default(self, tenant_id: str) -> WorkflowDefinition | None:
        return next(
            (
                d
                for d in self.uow.current_workflows().values()
                if d.belongs_to_tenant(tenant_id) and d.is_default
            ),
            None,
        )

    async def list_by_tenant(self, tenant_id: str) -> list[WorkflowDefinition]:
        return sorted(
            (
                d
                for d in self.uow.current_workflows().values()
                if d.belongs_to_tenant(tenant_id)
            ),
            key=lambda d: (d.name, d.id),
        )

    async def add(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        self.uow.staged_workflows[definition.id] = definition
        return definition

    async def replace(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        current = self.uow.current_workflows().get(definition.id)
        if current is None or current.version != definition.version - 1:
            raise ConcurrentModificationException(definition.id, "version mismatch")
        self._expect_committed_version(definition.id)
        self.uow.staged_workflows[definition.id] = definition
        return definition

    async def delete(self, definition_id: str, tenant_id: str) -> bool:
        if await self.get_by_id(definition_id, tenant_id) is None:
            return False
        self.uow.staged_workflows[definition_id] = None
        return True

    async def clear_default(self, tenant_id: str, except_id: str | None = None) -> None:
        for definition in self.uow.current_workflows().values():
            if (
                definition.belongs_to_tenant(tenant_id)
                and definition.is_default
                and definition.id != except_id
            ):
                self.uow.staged_workflows[definition.id] = replace(
                    definition, is_default=False
                )


class MemoryTaskRepository:
    """Implements ITaskRepository on a MemoryUnitOfWork."""

    def __init__(self, uow: MemoryUnitOfWork) -> None:
        self.uow = uow

    async def get_by_id(self, task_id: str, tenant_id: str) -> TaskEntity | None:
        task = self.uow.current_tasks().get(task_id)
        if task is None or not task.belongs_to_tenant(tenant_id):
            return None
        return task

    async def get_for_update(self, task_id: str, tenant_id: str) -> TaskEntity | None:
        if await self.get_by_id(task_id, tenant_id) is None:
            return None
        await self.uow.acquire_task_lock(task_id)
        # Re-read: the previous holder may have committed while we waited.
        return await self.get_by_id(task_id, tenant_id)

    async def list_by_tenant(
        self,
        tenant_id: str,
        assignee_id: str | None = None,
        status: str | None = None,
        workflow_id: str | None = None,
    ) -> list[TaskEntity]:
        tasks = [
            t
            for t in self.uow.current_tasks().values()
            if t.belongs_to_tenant(tenant_id)
            and (assignee_id is None or t.assignee_id == assignee_id)
            and (status is None or t.status == status)
            and (workflow_id is None or t.workflow_id == workflow_id)
        ]
        return sorted(tasks, key=lambda t: (t.created_at is None, t.created_at, t.id))

    async def add(self, task: TaskEntity) -> TaskEntity:
        self.uow.staged_tasks[task.id] = task
        return task

    async def update(self, task: TaskEntity, expected_version: int) -> TaskEntity:
        current = self.uow.current_tasks().get(task.id)
        if current is None or current.version != expected_version:
            raise ConcurrentModificationException(task.id, "version mismatch")
        committed = self.uow.store.tasks.get(task.id)
        if committed is not None:
            self.uow.expected_task_versions.setdefault(task.id, committed.version)
        self.uow.staged_tasks[task.id] = task
        return task

    async def delete(self, task_id: str, tenant_id: str) -> bool:
        if await self.get_by_id(task_id, tenant_id) is None:
            return False
        self.uow.staged_tasks[task_id] = None
        for entry_id in [k for k, v in self.uow.staged_logs.items() if v.task_id == task_id]:
            del self.uow.staged_logs[entry_id]
        return True

    async def count_by_workflow(self, tenant_id: str, workflow_id: str) -> int:
        return len(await self.list_by_tenant(tenant_id, workflow_id=workflow_id))

    async def statuses_in_use(self, tenant_id: str, workflow_id: str) -> set[str]:
        return {t.status for t in await self.list_by_tenant(tenant_id, workflow_id=workflow_id)}


class MemoryStatusTimeLogRepository:
    """Implements IStatusTimeLogRepository on a MemoryUnitOfWork."""

    def __init__(self, uow: MemoryUnitOfWork) -> None:
        self.uow = uow

    async def list_for_task(self, task_id: str) -> list[StatusTimeLogEntry]:
        return sorted(
            (e for e in self.uow.current_logs().values() if e.task_id == task_id),
            key=lambda e: (e.entered_at, e.id),
        )

    async def get_open_entries(self, task_id: str) -> list[StatusTimeLogEntry]:
        return [e for e in await self.list_for_task(task_id) if e.is_open]

    async def append(self, entry: StatusTimeLogEntry) -> StatusTimeLogEntry:
        self.uow.staged_logs[entry.id] = entry
        return entry

    async def close(self, entry: StatusTimeLogEntry) -> StatusTimeLogEntry:
        current = self.uow.current_logs().get(entry.id)
        if current is None or not current.is_open:
            raise ConcurrentModificationException(entry.task_id, "log entry already closed")
        self.uow.staged_logs[entry.id] = entry
        return entry
