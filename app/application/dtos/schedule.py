"""DTOs for schedule projection results (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.value_objects.occurrence import Occurrence


@dataclass(frozen=True)
class TaskOccurrence:
    """One calendar entry: an occurrence tagged with the task it belongs to."""

    task_id: str
    title: str
    status: str
    assignee_id: str | None
    occurrence: Occurrence
