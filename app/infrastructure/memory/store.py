"""Process-local store backing database_backend=memory.

Holds committed state only. Units of work stage their writes and apply
them here in one synchronous step, so no other coroutine can observe a
half-applied commit.
"""

from __future__ import annotations

import asyncio

from app.domain.entities.status_time_log import StatusTimeLogEntry
from app.domain.entities.task import TaskEntity
from app.domain.entities.workflow import WorkflowDefinition


class InMemoryStore:
    """Committed workflows, tasks and ledger entries, plus per-task locks."""

    def __init__(self) -> None:
        self.workflows: dict[str, WorkflowDefinition] = {}
        self.tasks: dict[str, TaskEntity] = {}
        self.status_logs: dict[str, StatusTimeLogEntry] = {}
        self._task_locks: dict[str, asyncio.Lock] = {}

    def task_lock(self, task_id: str) -> asyncio.Lock:
        lock = self._task_locks.get(task_id)
        if lock is None:
            lock = self._task_locks[task_id] = asyncio.Lock()
        return lock

    def forget_lock(self, task_id: str) -> None:
        """Drop the lock of a deleted task once nobody holds it."""
        lock = self._task_locks.get(task_id)
        if lock is not None and not lock.locked():
            del self._task_locks[task_id]

    def clear(self) -> None:
        self.workflows.clear()
        self.tasks.clear()
        self.status_logs.clear()
        self._task_locks.clear()
