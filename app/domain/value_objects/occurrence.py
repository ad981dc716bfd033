"""Concrete calendar occurrence produced by schedule projection."""

from dataclasses import dataclass
from datetime import date, datetime, time


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


@dataclass(frozen=True)
class Occurrence:
    """One dated slot of a schedule.

    start_time/end_time are both None for an all-day occurrence. Times are
    local wall-clock values; the projector does no timezone conversion.
    """

    date: date
    start_time: time | None = None
    end_time: time | None = None

    @property
    def is_all_day(self) -> bool:
        return self.start_time is None and self.end_time is None

    @property
    def is_inverted(self) -> bool:
        """True when the window ends before it starts (a data-entry error)."""
        if self.start_time is None or self.end_time is None:
            return False
        return self.end_time < self.start_time

    @property
    def duration_minutes(self) -> int | None:
        """end - start in minutes, never negative; None unless both ends are set."""
        if self.start_time is None or self.end_time is None:
            return None
        return max(0, _minutes(self.end_time) - _minutes(self.start_time))

    def starts_at(self) -> datetime:
        """Naive local datetime at which the occurrence begins (midnight if all-day)."""
        return datetime.combine(self.date, self.start_time or time.min)
