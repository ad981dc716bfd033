"""Schedule and occurrence API schemas.

Schedules are a discriminated union on schedule_type; to_domain() hands the
JSON form to schedule_from_dict so API and storage share one parser.
"""

from datetime import date, time
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from app.application.dtos.schedule import TaskOccurrence
from app.domain.entities.schedule import (
    TaskSchedule,
    schedule_from_dict,
    schedule_to_dict,
)
from app.domain.exceptions import ValidationException
from app.domain.value_objects.occurrence import Occurrence


class TimeWindowSchema(BaseModel):
    start_time: time | None = Field(default=None, description="HH:MM, local")
    end_time: time | None = Field(default=None, description="HH:MM, local")


class WeeklySlotSchema(TimeWindowSchema):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday .. 6 = Saturday")


class _ScheduleBase(BaseModel):
    def to_domain(self) -> TaskSchedule:
        """Domain schedule; raises ValueError on malformed content."""
        return schedule_from_dict(self.model_dump(mode="json"))


class DeadlineScheduleSchema(_ScheduleBase):
    schedule_type: Literal["deadline"] = "deadline"
    due_date: date


class DailyHoursScheduleSchema(_ScheduleBase):
    schedule_type: Literal["daily_hours"] = "daily_hours"
    start_date: date
    end_date: date | None = None
    windows: list[TimeWindowSchema] = Field(default_factory=list)


class WeeklyDaysScheduleSchema(_ScheduleBase):
    schedule_type: Literal["weekly_days"] = "weekly_days"
    start_date: date
    end_date: date | None = None
    slots: list[WeeklySlotSchema] = Field(default_factory=list)


class MonthlyDayScheduleSchema(_ScheduleBase):
    schedule_type: Literal["monthly_day"] = "monthly_day"
    start_date: date
    end_date: date | None = None
    monthly_day: int = Field(..., ge=1, le=31)
    monthly_time: time | None = None


ScheduleSchema = Annotated[
    DeadlineScheduleSchema
    | DailyHoursScheduleSchema
    | WeeklyDaysScheduleSchema
    | MonthlyDayScheduleSchema,
    Field(discriminator="schedule_type"),
]


class ScheduleUpdateRequest(BaseModel):
    """Request body for PUT /tasks/{id}/schedule; null schedule clears it."""

    schedule: ScheduleSchema | None = None
    due_date: date | None = None


class OccurrencesRequest(BaseModel):
    """Request body for POST /schedules/occurrences."""

    schedule: ScheduleSchema


class OccurrenceResponse(BaseModel):
    """One projected occurrence."""

    date: date
    start_time: time | None
    end_time: time | None
    is_all_day: bool
    is_inverted: bool
    duration_minutes: int | None

    @classmethod
    def from_occurrence(cls, occurrence: Occurrence) -> "OccurrenceResponse":
        return cls(
            date=occurrence.date,
            start_time=occurrence.start_time,
            end_time=occurrence.end_time,
            is_all_day=occurrence.is_all_day,
            is_inverted=occurrence.is_inverted,
            duration_minutes=occurrence.duration_minutes,
        )


class CalendarEntryResponse(OccurrenceResponse):
    """Calendar feed entry: an occurrence tagged with its task."""

    task_id: str
    title: str
    status: str
    assignee_id: str | None

    @classmethod
    def from_task_occurrence(cls, item: TaskOccurrence) -> "CalendarEntryResponse":
        base = OccurrenceResponse.from_occurrence(item.occurrence).model_dump()
        return cls(
            **base,
            task_id=item.task_id,
            title=item.title,
            status=item.status,
            assignee_id=item.assignee_id,
        )


def schedule_payload(schedule: TaskSchedule | None) -> dict[str, Any] | None:
    """JSON form of a domain schedule for responses."""
    if schedule is None:
        return None
    return schedule_to_dict(schedule)


def to_domain_schedule(schedule: ScheduleSchema | None) -> TaskSchedule | None:
    """Domain schedule for a request body; ValidationException on bad content."""
    if schedule is None:
        return None
    try:
        return schedule.to_domain()
    except ValueError as e:
        raise ValidationException(str(e), field="schedule") from e
