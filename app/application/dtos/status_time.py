"""DTOs for status-time accounting (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.status_time_log import StatusTimeLogEntry


@dataclass(frozen=True)
class TransitionRecord:
    """Ledger writes for one status change: entries to close and the one to append."""

    closed_entries: tuple[StatusTimeLogEntry, ...]
    opened_entry: StatusTimeLogEntry


@dataclass(frozen=True)
class StatusDuration:
    """Total time a task has spent in one status."""

    status: str
    total_seconds: int
    visit_count: int
    is_current: bool
