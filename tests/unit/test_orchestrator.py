"""Tests for WorkflowOrchestrator.change_status over the in-memory unit of work."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from app.application.dtos.task import CreateTaskCommand
from app.application.dtos.workflow import WorkflowDefinitionCommand
from app.application.use_cases.status_time import StatusTimeQueryService
from app.application.use_cases.tasks import TaskService, WorkflowOrchestrator
from app.application.use_cases.workflows import WorkflowDefinitionService
from app.domain.entities.task import TaskEntity
from app.domain.entities.workflow import StatusDefinition, TransitionRule
from app.domain.enums import RejectionCode
from app.domain.exceptions import ResourceNotFoundException
from app.domain.value_objects.results import Rejection

TENANT = "t1"
T0 = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    async def publish_status_changed(self, event) -> bool:
        self.events.append(event)
        return True


class BrokenPublisher:
    async def publish_status_changed(self, event) -> bool:
        raise ConnectionError("broker down")


def _command() -> WorkflowDefinitionCommand:
    return WorkflowDefinitionCommand(
        name="Tasks",
        statuses=[
            StatusDefinition("pending", "Pending", 0),
            StatusDefinition("in_progress", "In progress", 1),
            StatusDefinition("completed", "Completed", 2),
            StatusDefinition("cancelled", "Cancelled", 3),
        ],
        transitions=[
            TransitionRule.of("pending", ["in_progress", "cancelled"]),
            TransitionRule.of("in_progress", ["completed", "cancelled"]),
        ],
        role_restrictions={"pending->cancelled": ["admin"]},
    )


async def _seed_task(uow_factory, created_at: datetime = T0) -> TaskEntity:
    await WorkflowDefinitionService(uow_factory).create(TENANT, _command())
    task = await TaskService(uow_factory, clock=lambda: created_at).create_task(
        TENANT, "creator", CreateTaskCommand(title="Write report")
    )
    assert isinstance(task, TaskEntity)
    return task


async def test_admitted_change_updates_task_and_ledger(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    orchestrator = WorkflowOrchestrator(uow_factory)

    updated = await orchestrator.change_status(
        TENANT, task.id, "in_progress", "developer", "dev-1", now=T0 + timedelta(minutes=30)
    )

    assert isinstance(updated, TaskEntity)
    assert updated.status == "in_progress"
    assert updated.version == task.version + 1
    timeline = await StatusTimeQueryService(uow_factory).get_status_timeline(TENANT, task.id)
    assert [(e.from_status, e.to_status) for e in timeline] == [
        (None, "pending"),
        ("pending", "in_progress"),
    ]
    assert timeline[0].duration_seconds == 30 * 60
    assert [e for e in timeline if e.is_open] == [timeline[1]]


async def test_developer_cannot_take_admin_edge(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    result = await WorkflowOrchestrator(uow_factory).change_status(
        TENANT, task.id, "cancelled", "developer", "dev-1"
    )
    assert isinstance(result, Rejection)
    assert result.code is RejectionCode.FORBIDDEN
    unchanged = await TaskService(uow_factory).get_task(TENANT, task.id)
    assert unchanged.status == "pending"
    assert unchanged.version == task.version


async def test_admin_takes_admin_edge_and_duration_is_elapsed_time(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    later = T0 + timedelta(hours=2, seconds=5)
    result = await WorkflowOrchestrator(uow_factory, clock=lambda: later).change_status(
        TENANT, task.id, "cancelled", "admin", "admin-1"
    )
    assert isinstance(result, TaskEntity)
    assert result.completed_at == later
    summary = await StatusTimeQueryService(uow_factory).get_status_summary(
        TENANT, task.id, as_of=later + timedelta(minutes=1)
    )
    assert summary == {"pending": 2 * 3600 + 5, "cancelled": 60}


async def test_status_report_reads_ledger_once(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    later = T0 + timedelta(hours=1)
    await WorkflowOrchestrator(uow_factory, clock=lambda: later).change_status(
        TENANT, task.id, "in_progress", "developer", "dev-1"
    )
    opened = []

    def counting_factory():
        opened.append(1)
        return uow_factory()

    totals, detailed = await StatusTimeQueryService(counting_factory).get_status_report(
        TENANT, task.id, as_of=later + timedelta(minutes=10)
    )

    assert len(opened) == 1
    assert totals == {"pending": 3600, "in_progress": 600}
    assert {d.status: d.total_seconds for d in detailed} == totals
    assert [d.status for d in detailed if d.is_current] == ["in_progress"]


@pytest.mark.parametrize(
    ("to_status", "code"),
    [
        ("pending", RejectionCode.NO_OP_TRANSITION),
        ("completed", RejectionCode.ILLEGAL_TRANSITION),
        ("archived", RejectionCode.UNKNOWN_STATUS),
    ],
)
async def test_rejections_write_nothing(uow_factory, store, to_status, code) -> None:
    task = await _seed_task(uow_factory)
    logs_before = dict(store.status_logs)
    result = await WorkflowOrchestrator(uow_factory).change_status(
        TENANT, task.id, to_status, "admin", "admin-1"
    )
    assert isinstance(result, Rejection)
    assert result.code is code
    assert store.status_logs == logs_before
    assert store.tasks[task.id] == task


async def test_expected_status_mismatch_is_concurrent_modification(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    result = await WorkflowOrchestrator(uow_factory).change_status(
        TENANT, task.id, "in_progress", "developer", "dev-1", expected_status="in_progress"
    )
    assert isinstance(result, Rejection)
    assert result.code is RejectionCode.CONCURRENT_MODIFICATION
    assert result.details["current_status"] == "pending"


async def test_concurrent_identical_changes_admit_exactly_one(uow_factory, store) -> None:
    task = await _seed_task(uow_factory)
    orchestrator = WorkflowOrchestrator(uow_factory)

    results = await asyncio.gather(
        orchestrator.change_status(TENANT, task.id, "in_progress", "developer", "dev-1"),
        orchestrator.change_status(TENANT, task.id, "in_progress", "developer", "dev-2"),
    )

    admitted = [r for r in results if isinstance(r, TaskEntity)]
    rejected = [r for r in results if isinstance(r, Rejection)]
    assert len(admitted) == 1
    assert [r.code for r in rejected] == [RejectionCode.NO_OP_TRANSITION]
    open_entries = [e for e in store.status_logs.values() if e.is_open]
    assert len(open_entries) == 1
    assert open_entries[0].to_status == "in_progress"


async def test_lock_timeout_becomes_concurrent_modification(uow_factory, store) -> None:
    task = await _seed_task(uow_factory)
    lock = store.task_lock(task.id)
    await lock.acquire()
    try:
        result = await WorkflowOrchestrator(uow_factory).change_status(
            TENANT, task.id, "in_progress", "developer", "dev-1"
        )
    finally:
        lock.release()
    assert isinstance(result, Rejection)
    assert result.code is RejectionCode.CONCURRENT_MODIFICATION


async def test_event_published_after_commit(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    publisher = RecordingPublisher()
    await WorkflowOrchestrator(uow_factory, publisher=publisher).change_status(
        TENANT, task.id, "in_progress", "developer", "dev-1", now=T0
    )
    (event,) = publisher.events
    assert (event.tenant_id, event.task_id, event.from_status, event.to_status) == (
        TENANT,
        task.id,
        "pending",
        "in_progress",
    )
    assert event.actor_id == "dev-1"


async def test_no_event_for_rejected_change(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    publisher = RecordingPublisher()
    await WorkflowOrchestrator(uow_factory, publisher=publisher).change_status(
        TENANT, task.id, "completed", "developer", "dev-1"
    )
    assert publisher.events == []


async def test_publisher_failure_does_not_undo_change(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    result = await WorkflowOrchestrator(uow_factory, publisher=BrokenPublisher()).change_status(
        TENANT, task.id, "in_progress", "developer", "dev-1"
    )
    assert isinstance(result, TaskEntity)
    assert (await TaskService(uow_factory).get_task(TENANT, task.id)).status == "in_progress"


async def test_missing_task_raises_not_found(uow_factory) -> None:
    await WorkflowDefinitionService(uow_factory).create(TENANT, _command())
    with pytest.raises(ResourceNotFoundException):
        await WorkflowOrchestrator(uow_factory).change_status(
            TENANT, "missing", "in_progress", "admin", "admin-1"
        )


async def test_task_of_other_tenant_is_not_found(uow_factory) -> None:
    task = await _seed_task(uow_factory)
    with pytest.raises(ResourceNotFoundException):
        await WorkflowOrchestrator(uow_factory).change_status(
            "t2", task.id, "in_progress", "admin", "admin-1"
        )
