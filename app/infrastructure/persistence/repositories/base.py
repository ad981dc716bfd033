"""Base repository: primary-key lookups scoped to a tenant, insert and delete."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ConcurrentModificationException
from app.infrastructure.persistence.database import Base

# PostgreSQL lock_not_available (raised when SET LOCAL lock_timeout expires).
_LOCK_NOT_AVAILABLE = "55P03"


def is_lock_timeout(error: DBAPIError) -> bool:
    """Return True if the driver error is a lock_timeout expiry."""
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == _LOCK_NOT_AVAILABLE:
        return True
    cause = getattr(orig, "__cause__", None)
    return type(cause).__name__ == "LockNotAvailableError"


class BaseRepository[ModelType: Base]:
    """Base repository with tenant-scoped get, locked get, add and delete.

    Subclasses map rows to domain entities; they never hand ORM objects to
    the application layer.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_row(
        self,
        entity_id: str,
        tenant_id: str | None = None,
        *,
        for_update: bool = False,
        read: bool = False,
    ) -> ModelType | None:
        """Return a row by primary key (and tenant), optionally locking it.

        for_update locks FOR UPDATE, or FOR SHARE when read is also set. Locked
        reads refresh a row already in the session so the caller sees the
        version it locked.

        Raises ConcurrentModificationException when the lock wait exceeds the
        transaction's lock_timeout.
        """
        model: Any = self.model
        stmt = select(self.model).where(model.id == entity_id)
        if tenant_id is not None:
            stmt = stmt.where(model.tenant_id == tenant_id)
        if for_update:
            stmt = stmt.with_for_update(read=read).execution_options(
                populate_existing=True
            )
        try:
            result = await self.db.execute(stmt)
        except DBAPIError as e:
            if for_update and is_lock_timeout(e):
                raise ConcurrentModificationException(entity_id, "lock timeout") from e
            raise
        return result.scalar_one_or_none()

    async def _add_row(self, obj: ModelType) -> ModelType:
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def _delete_row(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
