"""Schedule projection for a schedule that is not stored yet (form previews)."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import CurrentActor, get_schedule_query_service
from app.application.use_cases.schedules import ScheduleQueryService
from app.schemas.schedule import (
    OccurrenceResponse,
    OccurrencesRequest,
    to_domain_schedule,
)

router = APIRouter()


@router.post("/occurrences", response_model=list[OccurrenceResponse])
async def project_schedule(
    body: OccurrencesRequest,
    actor: CurrentActor,
    service: Annotated[ScheduleQueryService, Depends(get_schedule_query_service)],
    start: date = Query(...),
    end: date = Query(...),
):
    """Occurrences of body.schedule in [start, end]; an inverted range yields []."""
    schedule = to_domain_schedule(body.schedule)
    return [
        OccurrenceResponse.from_occurrence(o)
        for o in service.get_occurrences(schedule, start, end)
    ]
