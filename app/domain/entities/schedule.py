"""Task schedule shapes.

A schedule is a tagged union over four recurrence shapes. Dates are
calendar dates and times are local "HH:MM" wall-clock values; projection
never converts timezones.

Serialized form (JSON column and API payloads)::

    {"schedule_type": "weekly_days", "start_date": "2024-01-01",
     "end_date": null, "slots": [{"day_of_week": 1, "start_time": "09:00",
     "end_time": "11:00"}]}
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Any, ClassVar

from app.domain.enums import ScheduleType

# Python's date.weekday() is Monday=0; stored slots use Sunday=0.
SUNDAY_FIRST_OFFSET = 1


def sunday_first_weekday(day: date) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + SUNDAY_FIRST_OFFSET) % 7


@dataclass(frozen=True)
class TimeWindow:
    """Optional start/end times within a day; both None means all-day."""

    start_time: time | None = None
    end_time: time | None = None

    @property
    def is_inverted(self) -> bool:
        if self.start_time is None or self.end_time is None:
            return False
        return self.end_time < self.start_time


@dataclass(frozen=True)
class WeeklySlot:
    """A weekday (0 = Sunday) with an optional time window."""

    day_of_week: int
    start_time: time | None = None
    end_time: time | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be 0..6 (0 = Sunday), got {self.day_of_week}")

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)


@dataclass(frozen=True)
class DeadlineSchedule:
    """A single due date."""

    schedule_type: ClassVar[ScheduleType] = ScheduleType.DEADLINE

    due_date: date


@dataclass(frozen=True)
class DailyHoursSchedule:
    """Every day in [start_date, end_date], once per window."""

    schedule_type: ClassVar[ScheduleType] = ScheduleType.DAILY_HOURS

    start_date: date
    end_date: date | None = None
    windows: tuple[TimeWindow, ...] = ()


@dataclass(frozen=True)
class WeeklyDaysSchedule:
    """Selected weekdays in [start_date, end_date], once per matching slot."""

    schedule_type: ClassVar[ScheduleType] = ScheduleType.WEEKLY_DAYS

    start_date: date
    end_date: date | None = None
    slots: tuple[WeeklySlot, ...] = ()


@dataclass(frozen=True)
class MonthlyDaySchedule:
    """One day per month; days past the month's end clamp to its last day."""

    schedule_type: ClassVar[ScheduleType] = ScheduleType.MONTHLY_DAY

    start_date: date
    monthly_day: int
    end_date: date | None = None
    monthly_time: time | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.monthly_day <= 31:
            raise ValueError(f"monthly_day must be 1..31, got {self.monthly_day}")


TaskSchedule = DeadlineSchedule | DailyHoursSchedule | WeeklyDaysSchedule | MonthlyDaySchedule


def _fmt_time(value: time | None) -> str | None:
    return value.strftime("%H:%M") if value is not None else None


def _parse_time(value: Any) -> time | None:
    if value is None or value == "":
        return None
    parsed = value if isinstance(value, time) else time.fromisoformat(str(value))
    if parsed.tzinfo is not None:
        raise ValueError(f"times are local HH:MM without offset, got '{value}'")
    return parsed.replace(second=0, microsecond=0)


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _require_date(data: dict[str, Any], key: str) -> date:
    parsed = _parse_date(data.get(key))
    if parsed is None:
        raise ValueError(f"'{key}' is required for {data.get('schedule_type')} schedules")
    return parsed


def schedule_to_dict(schedule: TaskSchedule) -> dict[str, Any]:
    """Serialize a schedule to its JSON-compatible dict."""
    out: dict[str, Any] = {"schedule_type": schedule.schedule_type.value}
    match schedule:
        case DeadlineSchedule(due_date=due):
            out["due_date"] = due.isoformat()
        case DailyHoursSchedule():
            out["start_date"] = schedule.start_date.isoformat()
            out["end_date"] = schedule.end_date.isoformat() if schedule.end_date else None
            out["windows"] = [
                {"start_time": _fmt_time(w.start_time), "end_time": _fmt_time(w.end_time)}
                for w in schedule.windows
            ]
        case WeeklyDaysSchedule():
            out["start_date"] = schedule.start_date.isoformat()
            out["end_date"] = schedule.end_date.isoformat() if schedule.end_date else None
            out["slots"] = [
                {
                    "day_of_week": s.day_of_week,
                    "start_time": _fmt_time(s.start_time),
                    "end_time": _fmt_time(s.end_time),
                }
                for s in schedule.slots
            ]
        case MonthlyDaySchedule():
            out["start_date"] = schedule.start_date.isoformat()
            out["end_date"] = schedule.end_date.isoformat() if schedule.end_date else None
            out["monthly_day"] = schedule.monthly_day
            out["monthly_time"] = _fmt_time(schedule.monthly_time)
    return out


def schedule_from_dict(data: dict[str, Any]) -> TaskSchedule:
    """Build a schedule from its dict form.

    Raises:
        ValueError: Unknown schedule_type or missing/malformed fields.
    """
    try:
        schedule_type = ScheduleType(data.get("schedule_type"))
    except ValueError as e:
        raise ValueError(
            f"schedule_type must be one of {ScheduleType.values()}, got {data.get('schedule_type')!r}"
        ) from e

    if schedule_type is ScheduleType.DEADLINE:
        return DeadlineSchedule(due_date=_require_date(data, "due_date"))

    start = _require_date(data, "start_date")
    end = _parse_date(data.get("end_date"))
    if schedule_type is ScheduleType.DAILY_HOURS:
        return DailyHoursSchedule(
            start_date=start,
            end_date=end,
            windows=tuple(
                TimeWindow(_parse_time(w.get("start_time")), _parse_time(w.get("end_time")))
                for w in data.get("windows") or []
            ),
        )
    if schedule_type is ScheduleType.WEEKLY_DAYS:
        return WeeklyDaysSchedule(
            start_date=start,
            end_date=end,
            slots=tuple(
                WeeklySlot(
                    day_of_week=int(s["day_of_week"]),
                    start_time=_parse_time(s.get("start_time")),
                    end_time=_parse_time(s.get("end_time")),
                )
                for s in data.get("slots") or []
            ),
        )
    monthly_day = data.get("monthly_day")
    if monthly_day is None:
        raise ValueError("'monthly_day' is required for monthly_day schedules")
    return MonthlyDaySchedule(
        start_date=start,
        end_date=end,
        monthly_day=int(monthly_day),
        monthly_time=_parse_time(data.get("monthly_time")),
    )
