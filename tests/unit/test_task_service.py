"""Tests for TaskService and the read services built on the same unit of work."""

from datetime import UTC, date, datetime, time

import pytest

from app.application.dtos.task import CreateTaskCommand, UpdateTaskCommand
from app.application.dtos.workflow import WorkflowDefinitionCommand
from app.application.use_cases.schedules import ScheduleQueryService
from app.application.use_cases.status_time import StatusTimeQueryService
from app.application.use_cases.tasks import TaskService
from app.application.use_cases.workflows import WorkflowDefinitionService
from app.domain.entities.schedule import (
    DailyHoursSchedule,
    DeadlineSchedule,
    TimeWindow,
    WeeklyDaysSchedule,
    WeeklySlot,
)
from app.domain.entities.task import TaskEntity
from app.domain.entities.workflow import StatusDefinition, TransitionRule
from app.domain.enums import RejectionCode
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects.results import Rejection

TENANT = "t1"
T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


async def _workflow(uow_factory, name: str = "Tasks", **kwargs):
    return await WorkflowDefinitionService(uow_factory).create(
        TENANT,
        WorkflowDefinitionCommand(
            name=name,
            statuses=[
                StatusDefinition("open", "Open", 0),
                StatusDefinition("closed", "Closed", 1),
            ],
            transitions=[TransitionRule.of("open", ["closed"])],
            **kwargs,
        ),
    )


@pytest.fixture
def tasks(uow_factory) -> TaskService:
    return TaskService(uow_factory, clock=lambda: T0)


async def test_create_binds_default_workflow_and_initial_status(uow_factory, tasks) -> None:
    definition = await _workflow(uow_factory)
    task = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="  Plan  "))
    assert isinstance(task, TaskEntity)
    assert task.workflow_id == definition.id
    assert task.status == "open"
    assert task.title == "Plan"
    assert task.completed_at is None
    timeline = await StatusTimeQueryService(uow_factory).get_status_timeline(TENANT, task.id)
    assert [(e.from_status, e.to_status, e.actor_id, e.is_open) for e in timeline] == [
        (None, "open", "u1", True)
    ]


async def test_create_in_terminal_status_sets_completed_at(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    task = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="Done", status="closed"))
    assert task.completed_at == T0


async def test_create_with_unknown_status_is_rejected(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    result = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A", status="limbo"))
    assert isinstance(result, Rejection)
    assert result.code is RejectionCode.UNKNOWN_STATUS
    assert await tasks.list_tasks(TENANT) == []


async def test_create_without_default_workflow(tasks) -> None:
    with pytest.raises(ValidationException) as excinfo:
        await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A"))
    assert excinfo.value.details == {"field": "workflow_id"}


async def test_create_with_unknown_workflow(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    with pytest.raises(ResourceNotFoundException):
        await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A", workflow_id="missing"))


async def test_create_rejects_blank_title(tasks) -> None:
    with pytest.raises(ValidationException):
        await tasks.create_task(TENANT, "u1", CreateTaskCommand(title=" "))


async def test_create_rejects_inverted_schedule(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    schedule = DailyHoursSchedule(date(2024, 2, 1), date(2024, 1, 1), (TimeWindow(),))
    result = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A", schedule=schedule))
    assert isinstance(result, Rejection)
    assert result.code is RejectionCode.INVALID_SCHEDULE_RANGE


async def test_update_keeps_unset_fields(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    task = await tasks.create_task(
        TENANT, "u1", CreateTaskCommand(title="A", description="first", assignee_id="u2")
    )
    updated = await tasks.update_task(TENANT, task.id, UpdateTaskCommand(title="B"))
    assert (updated.title, updated.description, updated.assignee_id) == ("B", "first", "u2")
    assert updated.version == task.version + 1
    assert updated.status == task.status


async def test_update_schedule_and_clear_it(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    task = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A"))
    schedule = WeeklyDaysSchedule(date(2024, 1, 1), slots=(WeeklySlot(1),))
    updated = await tasks.update_schedule(TENANT, task.id, schedule, due_date=date(2024, 3, 1))
    assert updated.schedule == schedule
    cleared = await tasks.update_schedule(TENANT, task.id, None)
    assert cleared.schedule is None
    assert cleared.due_date is None


async def test_update_schedule_rejects_inverted_slot(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    task = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A"))
    bad = WeeklyDaysSchedule(date(2024, 1, 1), slots=(WeeklySlot(2, time(10, 0), time(9, 0)),))
    result = await tasks.update_schedule(TENANT, task.id, bad)
    assert result.code is RejectionCode.INVALID_SCHEDULE_RANGE
    assert (await tasks.get_task(TENANT, task.id)).schedule is None


async def test_list_filters(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    a = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A", assignee_id="u1"))
    await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="B", assignee_id="u2", status="closed"))
    assert [t.id for t in await tasks.list_tasks(TENANT, assignee_id="u1")] == [a.id]
    assert [t.title for t in await tasks.list_tasks(TENANT, status="closed")] == ["B"]
    assert await tasks.list_tasks("t2") == []


async def test_delete_task(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    task = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A"))
    await tasks.delete_task(TENANT, task.id)
    with pytest.raises(ResourceNotFoundException):
        await tasks.get_task(TENANT, task.id)
    with pytest.raises(ResourceNotFoundException):
        await StatusTimeQueryService(uow_factory).get_status_summary(TENANT, task.id)


async def test_task_occurrences_fall_back_to_due_date(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    task = await tasks.create_task(TENANT, "u1", CreateTaskCommand(title="A", due_date=date(2024, 1, 15)))
    queries = ScheduleQueryService(uow_factory, max_projection_days=31)
    (occurrence,) = await queries.get_task_occurrences(TENANT, task.id, date(2024, 1, 1), date(2024, 1, 31))
    assert occurrence.date == date(2024, 1, 15)
    assert occurrence.is_all_day


async def test_projection_range_is_bounded(uow_factory) -> None:
    queries = ScheduleQueryService(uow_factory, max_projection_days=31)
    schedule = DeadlineSchedule(date(2024, 1, 1))
    with pytest.raises(ValidationException):
        queries.get_occurrences(schedule, date(2024, 1, 1), date(2024, 2, 1))
    assert queries.get_occurrences(schedule, date(2024, 1, 1), date(2024, 1, 31))
    assert queries.get_occurrences(schedule, date(2025, 1, 1), date(2024, 1, 1)) == []


async def test_calendar_filters_by_assignee(uow_factory, tasks) -> None:
    await _workflow(uow_factory)
    mine = await tasks.create_task(
        TENANT, "u1", CreateTaskCommand(title="Mine", assignee_id="u1", due_date=date(2024, 1, 3))
    )
    await tasks.create_task(
        TENANT, "u1", CreateTaskCommand(title="Theirs", assignee_id="u2", due_date=date(2024, 1, 2))
    )
    queries = ScheduleQueryService(uow_factory, max_projection_days=31)
    everyone = await queries.get_calendar(TENANT, date(2024, 1, 1), date(2024, 1, 31))
    assert [item.title for item in everyone] == ["Theirs", "Mine"]
    only_mine = await queries.get_calendar(TENANT, date(2024, 1, 1), date(2024, 1, 31), assignee_id="u1")
    assert [item.task_id for item in only_mine] == [mine.id]
