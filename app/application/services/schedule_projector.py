"""Expands task schedules into concrete dated occurrences.

Pure and lock-free. occurrences() is a generator, so callers can stop
early, and every call restarts from the beginning of the range. Iteration
is always bounded by min(end_date, query_end); an open-ended schedule
over a long range costs time proportional to the range, never more.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Iterator
from datetime import date, time, timedelta

from app.application.dtos.schedule import TaskOccurrence
from app.domain.entities.schedule import (
    DailyHoursSchedule,
    DeadlineSchedule,
    MonthlyDaySchedule,
    TaskSchedule,
    WeeklyDaysSchedule,
    WeeklySlot,
    sunday_first_weekday,
)
from app.domain.entities.task import TaskEntity
from app.domain.enums import RejectionCode
from app.domain.value_objects.occurrence import Occurrence
from app.domain.value_objects.results import Rejection

_ONE_DAY = timedelta(days=1)


def _days(first: date, last: date) -> Iterator[date]:
    """Every date in [first, last]; stops before stepping past date.max."""
    day = first
    while True:
        yield day
        if day >= last:
            return
        day += _ONE_DAY


def _effective_range(
    start_date: date,
    end_date: date | None,
    query_start: date,
    query_end: date,
) -> tuple[date, date] | None:
    """Intersection of the schedule's active range with the query range."""
    if query_start > query_end:
        return None
    if end_date is not None and end_date < start_date:
        return None
    lower = max(start_date, query_start)
    upper = min(end_date, query_end) if end_date is not None else query_end
    if lower > upper:
        return None
    return lower, upper


def _month_starts(lower: date, upper: date) -> Iterator[date]:
    year, month = lower.year, lower.month
    while True:
        first = date(year, month, 1)
        if first > upper:
            return
        yield first
        if year == date.max.year and month == 12:
            return
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def _deadline(schedule: DeadlineSchedule, qs: date, qe: date) -> Iterator[Occurrence]:
    if qs <= schedule.due_date <= qe:
        yield Occurrence(date=schedule.due_date)


def _daily(schedule: DailyHoursSchedule, qs: date, qe: date) -> Iterator[Occurrence]:
    if not schedule.windows:
        return
    bounds = _effective_range(schedule.start_date, schedule.end_date, qs, qe)
    if bounds is None:
        return
    for day in _days(*bounds):
        for window in schedule.windows:
            yield Occurrence(day, window.start_time, window.end_time)


def _weekly(schedule: WeeklyDaysSchedule, qs: date, qe: date) -> Iterator[Occurrence]:
    by_weekday: dict[int, list[WeeklySlot]] = {}
    for slot in schedule.slots:
        by_weekday.setdefault(slot.day_of_week, []).append(slot)
    if not by_weekday:
        return
    bounds = _effective_range(schedule.start_date, schedule.end_date, qs, qe)
    if bounds is None:
        return
    for day in _days(*bounds):
        for slot in by_weekday.get(sunday_first_weekday(day), ()):
            yield Occurrence(day, slot.start_time, slot.end_time)


def _monthly(schedule: MonthlyDaySchedule, qs: date, qe: date) -> Iterator[Occurrence]:
    bounds = _effective_range(schedule.start_date, schedule.end_date, qs, qe)
    if bounds is None:
        return
    lower, upper = bounds
    for first in _month_starts(lower, upper):
        days_in_month = calendar.monthrange(first.year, first.month)[1]
        target = first.replace(day=min(schedule.monthly_day, days_in_month))
        if lower <= target <= upper:
            yield Occurrence(target, schedule.monthly_time, None)


def _sort_key(item: TaskOccurrence) -> tuple[date, time, str]:
    occ = item.occurrence
    return occ.date, occ.start_time or time.min, item.task_id


class ScheduleProjector:
    """Projects schedules (one or many tasks) onto a date range."""

    def occurrences(
        self,
        schedule: TaskSchedule,
        query_start: date,
        query_end: date,
    ) -> Iterator[Occurrence]:
        """Occurrences of schedule inside [query_start, query_end], ascending by date.

        Empty when the query range is inverted, the schedule's end precedes
        its start, or a recurring schedule has no windows/slots.
        """
        match schedule:
            case DeadlineSchedule():
                return _deadline(schedule, query_start, query_end)
            case DailyHoursSchedule():
                return _daily(schedule, query_start, query_end)
            case WeeklyDaysSchedule():
                return _weekly(schedule, query_start, query_end)
            case MonthlyDaySchedule():
                return _monthly(schedule, query_start, query_end)
        return iter(())

    def validate_schedule(self, schedule: TaskSchedule) -> Rejection | None:
        """INVALID_SCHEDULE_RANGE for an inverted date range or time window, else None.

        Used when a schedule is saved; projection itself tolerates bad data.
        """
        if isinstance(schedule, DeadlineSchedule):
            return None
        if schedule.end_date is not None and schedule.end_date < schedule.start_date:
            return Rejection(
                code=RejectionCode.INVALID_SCHEDULE_RANGE,
                message="Schedule end date is before its start date.",
                details={
                    "start_date": schedule.start_date.isoformat(),
                    "end_date": schedule.end_date.isoformat(),
                },
            )
        windows = []
        if isinstance(schedule, DailyHoursSchedule):
            windows = list(schedule.windows)
        elif isinstance(schedule, WeeklyDaysSchedule):
            windows = [slot.window for slot in schedule.slots]
        for index, window in enumerate(windows):
            if window.is_inverted:
                return Rejection(
                    code=RejectionCode.INVALID_SCHEDULE_RANGE,
                    message="Time window ends before it starts.",
                    details={
                        "index": index,
                        "start_time": window.start_time.strftime("%H:%M"),
                        "end_time": window.end_time.strftime("%H:%M"),
                    },
                )
        return None

    def project_tasks(
        self,
        tasks: Iterable[TaskEntity],
        query_start: date,
        query_end: date,
    ) -> list[TaskOccurrence]:
        """Calendar feed across tasks, ordered by (date, start time, task id).

        Tasks without a schedule fall back to their due_date as a deadline;
        tasks with neither are skipped.
        """
        items: list[TaskOccurrence] = []
        for task in tasks:
            schedule = task.effective_schedule()
            if schedule is None:
                continue
            for occ in self.occurrences(schedule, query_start, query_end):
                items.append(
                    TaskOccurrence(
                        task_id=task.id,
                        title=task.title,
                        status=task.status,
                        assignee_id=task.assignee_id,
                        occurrence=occ,
                    )
                )
        items.sort(key=_sort_key)
        return items
