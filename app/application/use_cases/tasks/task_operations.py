"""Task use cases: create, read, edit, reschedule, delete."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime

from app.application.dtos.task import CreateTaskCommand, UpdateTaskCommand
from app.application.interfaces.services import UnitOfWorkFactory
from app.application.services.schedule_projector import ScheduleProjector
from app.application.services.status_time_tracker import StatusTimeTracker
from app.domain.entities.schedule import TaskSchedule
from app.domain.entities.task import TaskEntity
from app.domain.enums import RejectionCode
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects.results import Rejection
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class TaskService:
    """Task lifecycle outside of status changes (see WorkflowOrchestrator for those)."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        projector: ScheduleProjector | None = None,
        tracker: StatusTimeTracker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._projector = projector or ScheduleProjector()
        self._tracker = tracker or StatusTimeTracker()
        self._clock = clock

    async def create_task(
        self,
        tenant_id: str,
        actor_id: str | None,
        command: CreateTaskCommand,
    ) -> TaskEntity | Rejection:
        """Create a task bound to a workflow and open its first ledger entry.

        The workflow is command.workflow_id or the tenant default. The task
        row and the initial entry are written in one unit of work.
        """
        if not command.title.strip():
            raise ValidationException("Title must not be empty", field="title")
        if command.schedule is not None:
            invalid = self._projector.validate_schedule(command.schedule)
            if invalid is not None:
                return invalid

        async with self._uow_factory() as uow:
            if command.workflow_id:
                workflow_id = command.workflow_id
            else:
                default = await uow.workflows.get_default(tenant_id)
                if default is None:
                    raise ValidationException(
                        "No default workflow for this tenant; create one or pass workflow_id",
                        field="workflow_id",
                    )
                workflow_id = default.id
            definition = await uow.workflows.get_for_share(workflow_id, tenant_id)
            if definition is None:
                raise ResourceNotFoundException("workflow", workflow_id)

            status = command.status or definition.initial_status
            if not definition.has_status(status):
                return Rejection(
                    code=RejectionCode.UNKNOWN_STATUS,
                    message=f"Status '{status}' is not part of workflow '{definition.name}'.",
                    details={"status": status, "workflow_id": definition.id},
                )

            now = self._clock()
            task = TaskEntity(
                id=generate_cuid(),
                tenant_id=tenant_id,
                workflow_id=definition.id,
                title=command.title.strip(),
                description=command.description,
                status=status,
                assignee_id=command.assignee_id,
                schedule=command.schedule,
                due_date=command.due_date,
                completed_at=now if definition.is_terminal(status) else None,
                version=1,
                created_at=now,
                updated_at=now,
            )
            created = await uow.tasks.add(task)
            await uow.status_logs.append(
                self._tracker.open_initial(created.id, status, actor_id, now)
            )
        logger.info("Task %s created in %s (workflow %s)", created.id, status, definition.id)
        return created

    async def get_task(self, tenant_id: str, task_id: str) -> TaskEntity:
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_by_id(task_id, tenant_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def list_tasks(
        self,
        tenant_id: str,
        assignee_id: str | None = None,
        status: str | None = None,
    ) -> list[TaskEntity]:
        async with self._uow_factory() as uow:
            return await uow.tasks.list_by_tenant(
                tenant_id, assignee_id=assignee_id, status=status
            )

    async def update_task(
        self, tenant_id: str, task_id: str, command: UpdateTaskCommand
    ) -> TaskEntity:
        """Edit title/description/assignee. Status is not editable here."""
        if command.title is not None and not command.title.strip():
            raise ValidationException("Title must not be empty", field="title")
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_for_update(task_id, tenant_id)
            if task is None:
                raise ResourceNotFoundException("task", task_id)
            changed = replace(
                task,
                title=command.title.strip() if command.title is not None else task.title,
                description=(
                    command.description
                    if command.description is not None
                    else task.description
                ),
                assignee_id=(
                    command.assignee_id
                    if command.assignee_id is not None
                    else task.assignee_id
                ),
                version=task.version + 1,
                updated_at=self._clock(),
            )
            return await uow.tasks.update(changed, expected_version=task.version)

    async def update_schedule(
        self,
        tenant_id: str,
        task_id: str,
        schedule: TaskSchedule | None,
        due_date: date | None = None,
    ) -> TaskEntity | Rejection:
        """Replace the task's schedule and due date (None clears them)."""
        if schedule is not None:
            invalid = self._projector.validate_schedule(schedule)
            if invalid is not None:
                return invalid
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_for_update(task_id, tenant_id)
            if task is None:
                raise ResourceNotFoundException("task", task_id)
            changed = replace(
                task,
                schedule=schedule,
                due_date=due_date,
                version=task.version + 1,
                updated_at=self._clock(),
            )
            return await uow.tasks.update(changed, expected_version=task.version)

    async def delete_task(self, tenant_id: str, task_id: str) -> None:
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_for_update(task_id, tenant_id)
            if task is None:
                raise ResourceNotFoundException("task", task_id)
            await uow.tasks.delete(task_id, tenant_id)
        logger.info("Task %s deleted", task_id)
