"""Schedule read use cases: occurrences of one schedule and the tenant calendar."""

from __future__ import annotations

from datetime import date

from app.application.dtos.schedule import TaskOccurrence
from app.application.interfaces.services import UnitOfWorkFactory
from app.application.services.schedule_projector import ScheduleProjector
from app.domain.entities.schedule import TaskSchedule
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects.occurrence import Occurrence


class ScheduleQueryService:
    """Projects stored or inline schedules onto a bounded date range."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        max_projection_days: int,
        projector: ScheduleProjector | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_days = max_projection_days
        self._projector = projector or ScheduleProjector()

    def _check_range(self, start: date, end: date) -> None:
        # An inverted range is not an error; it projects to nothing.
        if end >= start and (end - start).days + 1 > self._max_days:
            raise ValidationException(
                f"Date range may span at most {self._max_days} days", field="end"
            )

    def get_occurrences(
        self, schedule: TaskSchedule, start: date, end: date
    ) -> list[Occurrence]:
        self._check_range(start, end)
        return list(self._projector.occurrences(schedule, start, end))

    async def get_task_occurrences(
        self, tenant_id: str, task_id: str, start: date, end: date
    ) -> list[Occurrence]:
        """Occurrences of a task's schedule, or of its due date when it has none."""
        self._check_range(start, end)
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_by_id(task_id, tenant_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        schedule = task.effective_schedule()
        if schedule is None:
            return []
        return list(self._projector.occurrences(schedule, start, end))

    async def get_calendar(
        self,
        tenant_id: str,
        start: date,
        end: date,
        assignee_id: str | None = None,
    ) -> list[TaskOccurrence]:
        self._check_range(start, end)
        async with self._uow_factory() as uow:
            tasks = await uow.tasks.list_by_tenant(tenant_id, assignee_id=assignee_id)
        return self._projector.project_tasks(tasks, start, end)
