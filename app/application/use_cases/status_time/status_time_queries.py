"""Status-time read use cases: per-status totals and the interval timeline."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from app.application.dtos.status_time import StatusDuration
from app.application.interfaces.services import UnitOfWorkFactory
from app.application.services.status_time_tracker import StatusTimeTracker
from app.domain.entities.status_time_log import StatusTimeLogEntry
from app.domain.exceptions import ResourceNotFoundException
from app.shared.utils.datetime import utc_now


class StatusTimeQueryService:
    """Reads a task's ledger and summarizes it."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        tracker: StatusTimeTracker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._tracker = tracker or StatusTimeTracker()
        self._clock = clock

    async def _entries(self, tenant_id: str, task_id: str) -> list[StatusTimeLogEntry]:
        async with self._uow_factory() as uow:
            task = await uow.tasks.get_by_id(task_id, tenant_id)
            if task is None:
                raise ResourceNotFoundException("task", task_id)
            return await uow.status_logs.list_for_task(task_id)

    async def get_status_summary(
        self, tenant_id: str, task_id: str, as_of: datetime | None = None
    ) -> dict[str, int]:
        entries = await self._entries(tenant_id, task_id)
        return self._tracker.summarize(entries, as_of or self._clock())

    async def get_status_summary_detailed(
        self, tenant_id: str, task_id: str, as_of: datetime | None = None
    ) -> list[StatusDuration]:
        entries = await self._entries(tenant_id, task_id)
        return self._tracker.summarize_detailed(entries, as_of or self._clock())

    async def get_status_report(
        self, tenant_id: str, task_id: str, as_of: datetime | None = None
    ) -> tuple[dict[str, int], list[StatusDuration]]:
        """Totals and per-status detail computed from one read of the ledger."""
        entries = await self._entries(tenant_id, task_id)
        at = as_of or self._clock()
        return (
            self._tracker.summarize(entries, at),
            self._tracker.summarize_detailed(entries, at),
        )

    async def get_status_timeline(
        self, tenant_id: str, task_id: str
    ) -> list[StatusTimeLogEntry]:
        entries = await self._entries(tenant_id, task_id)
        return self._tracker.timeline(entries)
