"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.schedule import (
    DailyHoursSchedule,
    DeadlineSchedule,
    MonthlyDaySchedule,
    TaskSchedule,
    TimeWindow,
    WeeklyDaysSchedule,
    WeeklySlot,
    schedule_from_dict,
    schedule_to_dict,
)
from app.domain.entities.status_time_log import StatusTimeLogEntry
from app.domain.entities.task import TaskEntity
from app.domain.entities.workflow import (
    StatusDefinition,
    TransitionRule,
    WorkflowDefinition,
    edge_key,
)

__all__ = [
    "DailyHoursSchedule",
    "DeadlineSchedule",
    "MonthlyDaySchedule",
    "StatusDefinition",
    "StatusTimeLogEntry",
    "TaskEntity",
    "TaskSchedule",
    "TimeWindow",
    "TransitionRule",
    "WeeklyDaysSchedule",
    "WeeklySlot",
    "WorkflowDefinition",
    "edge_key",
    "schedule_from_dict",
    "schedule_to_dict",
]
