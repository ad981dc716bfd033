"""Status time log repository (SQLAlchemy). Implements IStatusTimeLogRepository."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.status_time_log import StatusTimeLogEntry
from app.domain.exceptions import ConcurrentModificationException
from app.infrastructure.persistence.models.status_time_log import StatusTimeLog
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc


def _to_entity(row: StatusTimeLog) -> StatusTimeLogEntry:
    return StatusTimeLogEntry(
        id=row.id,
        task_id=row.task_id,
        from_status=row.from_status,
        to_status=row.to_status,
        entered_at=ensure_utc(row.entered_at),
        exited_at=ensure_utc(row.exited_at),
        duration_seconds=row.duration_seconds,
        actor_id=row.actor_id,
    )


class StatusTimeLogRepository(BaseRepository[StatusTimeLog]):
    """Append-only ledger; the only update allowed is closing an open row."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, StatusTimeLog)

    async def list_for_task(self, task_id: str) -> list[StatusTimeLogEntry]:
        result = await self.db.execute(
            select(StatusTimeLog)
            .where(StatusTimeLog.task_id == task_id)
            .order_by(StatusTimeLog.entered_at, StatusTimeLog.id)
        )
        return [_to_entity(row) for row in result.scalars().all()]

    async def get_open_entries(self, task_id: str) -> list[StatusTimeLogEntry]:
        result = await self.db.execute(
            select(StatusTimeLog)
            .where(
                StatusTimeLog.task_id == task_id,
                StatusTimeLog.exited_at.is_(None),
            )
            .order_by(StatusTimeLog.entered_at, StatusTimeLog.id)
        )
        return [_to_entity(row) for row in result.scalars().all()]

    async def append(self, entry: StatusTimeLogEntry) -> StatusTimeLogEntry:
        await self._add_row(
            StatusTimeLog(
                id=entry.id,
                task_id=entry.task_id,
                from_status=entry.from_status,
                to_status=entry.to_status,
                entered_at=entry.entered_at,
                exited_at=entry.exited_at,
                duration_seconds=entry.duration_seconds,
                actor_id=entry.actor_id,
            )
        )
        return entry

    async def close(self, entry: StatusTimeLogEntry) -> StatusTimeLogEntry:
        result = await self.db.execute(
            update(StatusTimeLog)
            .where(StatusTimeLog.id == entry.id, StatusTimeLog.exited_at.is_(None))
            .values(exited_at=entry.exited_at, duration_seconds=entry.duration_seconds)
        )
        if result.rowcount == 0:
            raise ConcurrentModificationException(entry.task_id, "log entry already closed")
        return entry
