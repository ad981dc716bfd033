"""Calendar feed: projected occurrences of every task of the tenant."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import CurrentActor, get_schedule_query_service
from app.application.use_cases.schedules import ScheduleQueryService
from app.schemas.schedule import CalendarEntryResponse

router = APIRouter()


@router.get("", response_model=list[CalendarEntryResponse])
async def get_calendar(
    actor: CurrentActor,
    service: Annotated[ScheduleQueryService, Depends(get_schedule_query_service)],
    start: date = Query(...),
    end: date = Query(...),
    assignee_id: str | None = Query(None),
):
    """Entries ordered by date, start time, then task id."""
    entries = await service.get_calendar(actor.tenant_id, start, end, assignee_id=assignee_id)
    return [CalendarEntryResponse.from_task_occurrence(e) for e in entries]
