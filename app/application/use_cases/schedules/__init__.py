"""Schedule read use cases."""

from app.application.use_cases.schedules.schedule_queries import ScheduleQueryService

__all__ = ["ScheduleQueryService"]
