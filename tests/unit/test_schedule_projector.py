"""Tests for ScheduleProjector: occurrence expansion, validation and calendar feed."""

from datetime import date, time, timedelta

import pytest

from app.application.services.schedule_projector import ScheduleProjector
from app.domain.entities.schedule import (
    DailyHoursSchedule,
    DeadlineSchedule,
    MonthlyDaySchedule,
    TimeWindow,
    WeeklyDaysSchedule,
    WeeklySlot,
)
from app.domain.entities.task import TaskEntity
from app.domain.enums import RejectionCode


@pytest.fixture
def projector() -> ScheduleProjector:
    return ScheduleProjector()


def _dates(occurrences) -> list[date]:
    return [o.date for o in occurrences]


@pytest.mark.parametrize(
    ("due", "expected"),
    [
        (date(2024, 3, 10), 1),
        (date(2024, 3, 1), 1),
        (date(2024, 3, 31), 1),
        (date(2024, 2, 29), 0),
        (date(2024, 4, 1), 0),
    ],
)
def test_deadline_yields_one_occurrence_iff_in_range(projector, due, expected) -> None:
    result = list(projector.occurrences(DeadlineSchedule(due), date(2024, 3, 1), date(2024, 3, 31)))
    assert len(result) == expected
    if expected:
        assert result[0].is_all_day


def test_weekly_monday_wednesday(projector) -> None:
    schedule = WeeklyDaysSchedule(
        start_date=date(2024, 1, 1),
        slots=(WeeklySlot(day_of_week=1), WeeklySlot(day_of_week=3)),
    )
    result = projector.occurrences(schedule, date(2024, 1, 1), date(2024, 1, 14))
    assert _dates(result) == [
        date(2024, 1, 1),
        date(2024, 1, 3),
        date(2024, 1, 8),
        date(2024, 1, 10),
    ]


def test_weekly_sunday_is_zero(projector) -> None:
    schedule = WeeklyDaysSchedule(start_date=date(2024, 1, 1), slots=(WeeklySlot(day_of_week=0),))
    assert _dates(projector.occurrences(schedule, date(2024, 1, 1), date(2024, 1, 14))) == [
        date(2024, 1, 7),
        date(2024, 1, 14),
    ]


def test_weekly_several_slots_same_day_keep_configured_order(projector) -> None:
    schedule = WeeklyDaysSchedule(
        start_date=date(2024, 1, 1),
        slots=(
            WeeklySlot(1, time(14, 0), time(15, 0)),
            WeeklySlot(1, time(9, 0), time(10, 0)),
        ),
    )
    result = list(projector.occurrences(schedule, date(2024, 1, 1), date(2024, 1, 1)))
    assert [o.start_time for o in result] == [time(14, 0), time(9, 0)]
    assert all(o.duration_minutes == 60 for o in result)


def test_monthly_day_31_clamps_in_february(projector) -> None:
    schedule = MonthlyDaySchedule(start_date=date(2024, 1, 1), monthly_day=31)
    result = projector.occurrences(schedule, date(2024, 1, 1), date(2024, 4, 30))
    assert _dates(result) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
    ]


def test_monthly_day_clamps_in_non_leap_february(projector) -> None:
    schedule = MonthlyDaySchedule(start_date=date(2023, 1, 1), monthly_day=30)
    result = projector.occurrences(schedule, date(2023, 2, 1), date(2023, 2, 28))
    assert _dates(result) == [date(2023, 2, 28)]


def test_monthly_respects_start_date_inside_first_month(projector) -> None:
    schedule = MonthlyDaySchedule(start_date=date(2024, 1, 20), monthly_day=15, monthly_time=time(8, 30))
    result = list(projector.occurrences(schedule, date(2024, 1, 1), date(2024, 3, 1)))
    assert _dates(result) == [date(2024, 2, 15)]
    assert result[0].start_time == time(8, 30)


def test_daily_hours_one_per_window_in_order(projector) -> None:
    schedule = DailyHoursSchedule(
        start_date=date(2024, 5, 1),
        end_date=date(2024, 5, 2),
        windows=(TimeWindow(time(9, 0), time(12, 0)), TimeWindow(time(13, 0), time(17, 0))),
    )
    result = list(projector.occurrences(schedule, date(2024, 4, 1), date(2024, 6, 1)))
    assert [(o.date, o.start_time) for o in result] == [
        (date(2024, 5, 1), time(9, 0)),
        (date(2024, 5, 1), time(13, 0)),
        (date(2024, 5, 2), time(9, 0)),
        (date(2024, 5, 2), time(13, 0)),
    ]


@pytest.mark.parametrize(
    "schedule",
    [
        DailyHoursSchedule(start_date=date(2024, 1, 1), windows=()),
        WeeklyDaysSchedule(start_date=date(2024, 1, 1), slots=()),
        DailyHoursSchedule(
            start_date=date(2024, 1, 10),
            end_date=date(2024, 1, 1),
            windows=(TimeWindow(),),
        ),
        MonthlyDaySchedule(start_date=date(2024, 1, 10), end_date=date(2024, 1, 1), monthly_day=5),
    ],
)
def test_degenerate_schedules_are_empty(projector, schedule) -> None:
    assert list(projector.occurrences(schedule, date(2024, 1, 1), date(2024, 12, 31))) == []


def test_inverted_query_range_is_empty(projector) -> None:
    schedule = DailyHoursSchedule(start_date=date(2024, 1, 1), windows=(TimeWindow(),))
    assert list(projector.occurrences(schedule, date(2024, 2, 1), date(2024, 1, 1))) == []


def test_unbounded_schedule_over_five_years_terminates(projector) -> None:
    start = date(2024, 1, 1)
    end = start + timedelta(days=5 * 365)
    daily = DailyHoursSchedule(start_date=start, windows=(TimeWindow(),))
    monthly = MonthlyDaySchedule(start_date=start, monthly_day=1)
    assert len(list(projector.occurrences(daily, start, end))) == (end - start).days + 1
    assert len(list(projector.occurrences(monthly, start, end))) == 60


def test_projection_near_date_max_does_not_overflow(projector) -> None:
    daily = DailyHoursSchedule(start_date=date(9999, 12, 30), windows=(TimeWindow(),))
    monthly = MonthlyDaySchedule(start_date=date(9999, 11, 1), monthly_day=31)
    assert len(list(projector.occurrences(daily, date(9999, 12, 1), date.max))) == 2
    assert _dates(projector.occurrences(monthly, date(9999, 11, 1), date.max)) == [
        date(9999, 11, 30),
        date(9999, 12, 31),
    ]


def test_occurrences_are_restartable(projector) -> None:
    schedule = WeeklyDaysSchedule(start_date=date(2024, 1, 1), slots=(WeeklySlot(2),))
    first = list(projector.occurrences(schedule, date(2024, 1, 1), date(2024, 3, 1)))
    second = list(projector.occurrences(schedule, date(2024, 1, 1), date(2024, 3, 1)))
    assert first == second
    assert first


def test_inverted_window_is_flagged_not_dropped(projector) -> None:
    schedule = DailyHoursSchedule(
        start_date=date(2024, 1, 1),
        windows=(TimeWindow(time(17, 0), time(9, 0)),),
    )
    (occurrence,) = projector.occurrences(schedule, date(2024, 1, 1), date(2024, 1, 1))
    assert occurrence.is_inverted
    assert occurrence.duration_minutes == 0


def test_validate_schedule(projector) -> None:
    assert projector.validate_schedule(DeadlineSchedule(date(2024, 1, 1))) is None
    inverted_range = projector.validate_schedule(
        WeeklyDaysSchedule(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1), slots=(WeeklySlot(1),))
    )
    assert inverted_range.code is RejectionCode.INVALID_SCHEDULE_RANGE
    inverted_slot = projector.validate_schedule(
        WeeklyDaysSchedule(start_date=date(2024, 1, 1), slots=(WeeklySlot(1, time(10, 0), time(9, 0)),))
    )
    assert inverted_slot.code is RejectionCode.INVALID_SCHEDULE_RANGE
    assert inverted_slot.details["index"] == 0


def test_project_tasks_orders_by_date_time_and_task(projector) -> None:
    def task(task_id: str, **kwargs) -> TaskEntity:
        return TaskEntity(id=task_id, tenant_id="t1", workflow_id="wf", title=task_id, status="pending", **kwargs)

    tasks = [
        task("b", schedule=DailyHoursSchedule(date(2024, 1, 1), date(2024, 1, 2), (TimeWindow(time(9, 0)),))),
        task("a", due_date=date(2024, 1, 2)),
        task("c"),
    ]
    feed = projector.project_tasks(tasks, date(2024, 1, 1), date(2024, 1, 31))
    assert [(i.occurrence.date, i.task_id) for i in feed] == [
        (date(2024, 1, 1), "b"),
        (date(2024, 1, 2), "a"),
        (date(2024, 1, 2), "b"),
    ]
