"""Task repository (SQLAlchemy). Implements ITaskRepository."""

from __future__ import annotations

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.schedule import schedule_from_dict, schedule_to_dict
from app.domain.entities.task import TaskEntity
from app.domain.exceptions import ConcurrentModificationException
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc


def _to_entity(t: Task) -> TaskEntity:
    """Map Task ORM to TaskEntity."""
    return TaskEntity(
        id=t.id,
        tenant_id=t.tenant_id,
        workflow_id=t.workflow_id,
        title=t.title,
        description=t.description,
        status=t.status,
        assignee_id=t.assignee_id,
        schedule=schedule_from_dict(t.schedule) if t.schedule else None,
        due_date=t.due_date,
        completed_at=ensure_utc(t.completed_at),
        version=t.version,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


class TaskRepository(BaseRepository[Task]):
    """Tasks of a tenant; status writes are guarded by the version column."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def get_by_id(self, task_id: str, tenant_id: str) -> TaskEntity | None:
        row = await self._get_row(task_id, tenant_id)
        return _to_entity(row) if row else None

    async def get_for_update(self, task_id: str, tenant_id: str) -> TaskEntity | None:
        """SELECT ... FOR UPDATE; the lock lasts until the transaction ends."""
        row = await self._get_row(task_id, tenant_id, for_update=True)
        return _to_entity(row) if row else None

    async def list_by_tenant(
        self,
        tenant_id: str,
        assignee_id: str | None = None,
        status: str | None = None,
        workflow_id: str | None = None,
    ) -> list[TaskEntity]:
        stmt = select(Task).where(Task.tenant_id == tenant_id)
        if assignee_id is not None:
            stmt = stmt.where(Task.assignee_id == assignee_id)
        if status is not None:
            stmt = stmt.where(Task.status == status)
        if workflow_id is not None:
            stmt = stmt.where(Task.workflow_id == workflow_id)
        result = await self.db.execute(stmt.order_by(Task.created_at, Task.id))
        return [_to_entity(row) for row in result.scalars().all()]

    async def add(self, task: TaskEntity) -> TaskEntity:
        row = Task(
            id=task.id,
            tenant_id=task.tenant_id,
            workflow_id=task.workflow_id,
            title=task.title,
            description=task.description,
            status=task.status,
            assignee_id=task.assignee_id,
            schedule=schedule_to_dict(task.schedule) if task.schedule else None,
            due_date=task.due_date,
            completed_at=task.completed_at,
            version=task.version,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
        await self._add_row(row)
        return task

    async def update(self, task: TaskEntity, expected_version: int) -> TaskEntity:
        result = await self.db.execute(
            update(Task)
            .where(
                Task.id == task.id,
                Task.tenant_id == task.tenant_id,
                Task.version == expected_version,
            )
            .values(
                title=task.title,
                description=task.description,
                status=task.status,
                assignee_id=task.assignee_id,
                schedule=schedule_to_dict(task.schedule) if task.schedule else None,
                due_date=task.due_date,
                completed_at=task.completed_at,
                version=task.version,
                updated_at=task.updated_at,
            )
        )
        if result.rowcount == 0:
            raise ConcurrentModificationException(task.id, "version mismatch")
        return task

    async def delete(self, task_id: str, tenant_id: str) -> bool:
        result = await self.db.execute(
            delete(Task).where(Task.id == task_id, Task.tenant_id == tenant_id)
        )
        return result.rowcount > 0

    async def count_by_workflow(self, tenant_id: str, workflow_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Task)
            .where(Task.tenant_id == tenant_id, Task.workflow_id == workflow_id)
        )
        return int(result.scalar_one())

    async def statuses_in_use(self, tenant_id: str, workflow_id: str) -> set[str]:
        result = await self.db.execute(
            select(Task.status)
            .distinct()
            .where(Task.tenant_id == tenant_id, Task.workflow_id == workflow_id)
        )
        return set(result.scalars().all())
