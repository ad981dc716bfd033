"""Domain enumerations for the taskflow service.

Enums represent fixed sets of domain values (schedule shapes, rejection codes).
"""

from enum import Enum


class ScheduleType(str, Enum):
    """Recurrence shape of a task schedule (the tag of the schedule union)."""

    DEADLINE = "deadline"
    DAILY_HOURS = "daily_hours"
    WEEKLY_DAYS = "weekly_days"
    MONTHLY_DAY = "monthly_day"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid schedule types as strings."""
        return [t.value for t in cls]


class RejectionCode(str, Enum):
    """Why the core refused an operation.

    Returned inside a Rejection value, never raised by the core.
    """

    NO_OP_TRANSITION = "NO_OP_TRANSITION"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    FORBIDDEN = "FORBIDDEN"
    UNKNOWN_STATUS = "UNKNOWN_STATUS"
    INVALID_SCHEDULE_RANGE = "INVALID_SCHEDULE_RANGE"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
