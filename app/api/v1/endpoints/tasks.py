"""Task API: CRUD, status changes, schedules and status-time accounting.

Status changes go through WorkflowOrchestrator; a Rejection it returns is
raised as RejectionException and mapped by the central exception handlers.
"""

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    CurrentActor,
    get_schedule_query_service,
    get_status_time_query_service,
    get_task_service,
    get_workflow_orchestrator,
)
from app.application.dtos.task import CreateTaskCommand, UpdateTaskCommand
from app.application.use_cases.schedules import ScheduleQueryService
from app.application.use_cases.status_time import StatusTimeQueryService
from app.application.use_cases.tasks import TaskService, WorkflowOrchestrator
from app.core.limiter import limit_writes
from app.domain.entities.task import TaskEntity
from app.domain.exceptions import RejectionException
from app.domain.value_objects.results import Rejection
from app.schemas.schedule import (
    OccurrenceResponse,
    ScheduleUpdateRequest,
    to_domain_schedule,
)
from app.schemas.status_time import (
    StatusDurationResponse,
    StatusSummaryResponse,
    StatusTimelineEntryResponse,
    StatusTimelineResponse,
)
from app.schemas.task import (
    StatusChangeRequest,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from app.shared.utils.datetime import ensure_utc, utc_now

router = APIRouter()

TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


def _task_or_raise(result: TaskEntity | Rejection) -> TaskResponse:
    if isinstance(result, Rejection):
        raise RejectionException(result)
    return TaskResponse.from_entity(result)


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    actor: CurrentActor,
    service: TaskServiceDep,
):
    """Create a task in its workflow's initial status (or body.status)."""
    result = await service.create_task(
        actor.tenant_id,
        actor.actor_id,
        CreateTaskCommand(
            title=body.title,
            description=body.description,
            workflow_id=body.workflow_id,
            status=body.status,
            assignee_id=body.assignee_id,
            schedule=to_domain_schedule(body.schedule),
            due_date=body.due_date,
        ),
    )
    return _task_or_raise(result)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    actor: CurrentActor,
    service: TaskServiceDep,
    assignee_id: str | None = Query(None),
    status: str | None = Query(None),
):
    tasks = await service.list_tasks(actor.tenant_id, assignee_id=assignee_id, status=status)
    return [TaskResponse.from_entity(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    actor: CurrentActor,
    service: TaskServiceDep,
):
    return TaskResponse.from_entity(await service.get_task(actor.tenant_id, task_id))


@router.patch("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdateRequest,
    actor: CurrentActor,
    service: TaskServiceDep,
):
    """Edit title, description or assignee. Use PUT /status to move the task."""
    task = await service.update_task(
        actor.tenant_id,
        task_id,
        UpdateTaskCommand(
            title=body.title,
            description=body.description,
            assignee_id=body.assignee_id,
        ),
    )
    return TaskResponse.from_entity(task)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    task_id: str,
    actor: CurrentActor,
    service: TaskServiceDep,
):
    await service.delete_task(actor.tenant_id, task_id)
    return Response(status_code=204)


@router.put("/{task_id}/status", response_model=TaskResponse)
@limit_writes
async def change_status(
    request: Request,
    task_id: str,
    body: StatusChangeRequest,
    actor: CurrentActor,
    orchestrator: Annotated[WorkflowOrchestrator, Depends(get_workflow_orchestrator)],
):
    """Move the task along one edge of its workflow.

    403 FORBIDDEN when the edge is restricted to other roles; 409 for
    NO_OP_TRANSITION, ILLEGAL_TRANSITION, UNKNOWN_STATUS and
    CONCURRENT_MODIFICATION.
    """
    result = await orchestrator.change_status(
        actor.tenant_id,
        task_id,
        body.status,
        actor.role,
        actor.actor_id,
        expected_status=body.expected_status,
    )
    return _task_or_raise(result)


@router.put("/{task_id}/schedule", response_model=TaskResponse)
@limit_writes
async def update_schedule(
    request: Request,
    task_id: str,
    body: ScheduleUpdateRequest,
    actor: CurrentActor,
    service: TaskServiceDep,
):
    """Replace the task's schedule (null clears it). 422 on an inverted range."""
    result = await service.update_schedule(
        actor.tenant_id,
        task_id,
        to_domain_schedule(body.schedule),
        due_date=body.due_date,
    )
    return _task_or_raise(result)


@router.get("/{task_id}/occurrences", response_model=list[OccurrenceResponse])
async def get_task_occurrences(
    task_id: str,
    actor: CurrentActor,
    service: Annotated[ScheduleQueryService, Depends(get_schedule_query_service)],
    start: date = Query(...),
    end: date = Query(...),
):
    """Occurrences of the task's schedule in [start, end]; due date if unscheduled."""
    occurrences = await service.get_task_occurrences(actor.tenant_id, task_id, start, end)
    return [OccurrenceResponse.from_occurrence(o) for o in occurrences]


@router.get("/{task_id}/status-summary", response_model=StatusSummaryResponse)
async def get_status_summary(
    task_id: str,
    actor: CurrentActor,
    service: Annotated[StatusTimeQueryService, Depends(get_status_time_query_service)],
    as_of: datetime | None = Query(None, description="Defaults to now"),
):
    """Seconds spent in each status, the current one counted up to as_of."""
    at = ensure_utc(as_of) if as_of is not None else utc_now()
    totals, detailed = await service.get_status_report(actor.tenant_id, task_id, as_of=at)
    return StatusSummaryResponse(
        task_id=task_id,
        as_of=at,
        totals=totals,
        statuses=[StatusDurationResponse.model_validate(d) for d in detailed],
    )


@router.get("/{task_id}/status-timeline", response_model=StatusTimelineResponse)
async def get_status_timeline(
    task_id: str,
    actor: CurrentActor,
    service: Annotated[StatusTimeQueryService, Depends(get_status_time_query_service)],
):
    entries = await service.get_status_timeline(actor.tenant_id, task_id)
    return StatusTimelineResponse(
        task_id=task_id,
        entries=[StatusTimelineEntryResponse.model_validate(e) for e in entries],
    )
