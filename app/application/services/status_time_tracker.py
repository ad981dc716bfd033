"""Status interval ledger: opening/closing entries and time-in-status totals.

All functions are pure over a list of entries. Persisting the writes
returned by record_transition atomically with the task update is the
orchestrator's job.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from app.application.dtos.status_time import StatusDuration, TransitionRecord
from app.domain.entities.status_time_log import StatusTimeLogEntry
from app.shared.utils.generators import generate_cuid


def _timeline_key(entry: StatusTimeLogEntry) -> tuple[datetime, str]:
    return entry.entered_at, entry.id


class StatusTimeTracker:
    """Builds ledger entries and summarizes time spent per status."""

    def __init__(self, id_factory: Callable[[], str] = generate_cuid) -> None:
        self._new_id = id_factory

    def open_initial(
        self,
        task_id: str,
        status: str,
        actor_id: str | None,
        now: datetime,
    ) -> StatusTimeLogEntry:
        """First entry of a task, written when the task is created."""
        return StatusTimeLogEntry(
            id=self._new_id(),
            task_id=task_id,
            from_status=None,
            to_status=status,
            entered_at=now,
            actor_id=actor_id,
        )

    def record_transition(
        self,
        log: Iterable[StatusTimeLogEntry],
        task_id: str,
        new_status: str,
        actor_id: str | None,
        now: datetime,
        previous_status: str | None = None,
    ) -> TransitionRecord:
        """Close every open entry of task_id at now and open one for new_status.

        After applying the record the task has exactly one open entry. The new
        entry's from_status is the status of the most recent open entry, or
        previous_status when the ledger has none (tasks created before the
        ledger existed).
        """
        open_entries = sorted(
            (e for e in log if e.task_id == task_id and e.is_open),
            key=_timeline_key,
        )
        closed = tuple(entry.close(now) for entry in open_entries)
        from_status = open_entries[-1].to_status if open_entries else previous_status
        opened = StatusTimeLogEntry(
            id=self._new_id(),
            task_id=task_id,
            from_status=from_status,
            to_status=new_status,
            entered_at=now,
            actor_id=actor_id,
        )
        return TransitionRecord(closed_entries=closed, opened_entry=opened)

    def summarize(
        self, entries: Iterable[StatusTimeLogEntry], as_of: datetime
    ) -> dict[str, int]:
        """Seconds per status: closed durations plus the open entry up to as_of.

        Non-decreasing in as_of; the open interval never counts negative.
        """
        totals: dict[str, int] = {}
        for entry in self.timeline(entries):
            totals[entry.to_status] = totals.get(entry.to_status, 0) + entry.elapsed_at(as_of)
        return totals

    def summarize_detailed(
        self, entries: Iterable[StatusTimeLogEntry], as_of: datetime
    ) -> list[StatusDuration]:
        """Per-status totals with visit counts, longest first."""
        ordered = self.timeline(entries)
        totals: dict[str, int] = {}
        visits: dict[str, int] = {}
        current: str | None = None
        for entry in ordered:
            totals[entry.to_status] = totals.get(entry.to_status, 0) + entry.elapsed_at(as_of)
            visits[entry.to_status] = visits.get(entry.to_status, 0) + 1
            if entry.is_open:
                current = entry.to_status
        rows = [
            StatusDuration(
                status=status,
                total_seconds=total,
                visit_count=visits[status],
                is_current=status == current,
            )
            for status, total in totals.items()
        ]
        rows.sort(key=lambda row: row.total_seconds, reverse=True)
        return rows

    def timeline(self, entries: Iterable[StatusTimeLogEntry]) -> list[StatusTimeLogEntry]:
        """Entries ascending by entered_at, id breaking ties."""
        return sorted(entries, key=_timeline_key)
