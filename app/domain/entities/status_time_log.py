"""Status time ledger entry.

Each entry is one interval a task spent in to_status. Entries are
append-only: an open entry (exited_at is None) is closed exactly once,
when the task leaves the status.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from app.shared.utils.datetime import elapsed_seconds


@dataclass(frozen=True)
class StatusTimeLogEntry:
    """One interval of a task in a status."""

    id: str
    task_id: str
    from_status: str | None
    to_status: str
    entered_at: datetime
    exited_at: datetime | None = None
    duration_seconds: int | None = None
    actor_id: str | None = None

    @property
    def is_open(self) -> bool:
        return self.exited_at is None

    def close(self, at: datetime) -> "StatusTimeLogEntry":
        """Closed copy ending at `at`; duration floored to whole seconds, never negative.

        Raises:
            ValueError: The entry is already closed.
        """
        if not self.is_open:
            raise ValueError(f"Status log entry {self.id} is already closed")
        return replace(
            self,
            exited_at=at,
            duration_seconds=elapsed_seconds(self.entered_at, at),
        )

    def elapsed_at(self, as_of: datetime) -> int:
        """Seconds counted toward to_status as of `as_of`."""
        if self.duration_seconds is not None:
            return self.duration_seconds
        return elapsed_seconds(self.entered_at, as_of)
