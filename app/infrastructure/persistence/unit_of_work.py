"""SQLAlchemy unit of work: one AsyncSession transaction for all three repositories."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Self

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.exceptions import StorageException
from app.infrastructure.persistence.database import set_lock_timeout
from app.infrastructure.persistence.repositories.status_time_log_repo import (
    StatusTimeLogRepository,
)
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.workflow_definition_repo import (
    WorkflowDefinitionRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """Implements IUnitOfWork over a single transaction.

    The transaction starts on enter with SET LOCAL lock_timeout, so
    get_for_update waits at most lock_timeout_seconds. Clean exit commits;
    an exception rolls back. Driver errors surface as StorageException.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lock_timeout_seconds: float,
    ) -> None:
        self._session_factory = session_factory
        self._lock_timeout = lock_timeout_seconds
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> Self:
        session = self._session_factory()
        try:
            await set_lock_timeout(session, self._lock_timeout)
        except SQLAlchemyError as e:
            await session.close()
            logger.exception("Could not open a database transaction")
            raise StorageException() from e
        self._session = session
        self.workflows = WorkflowDefinitionRepository(session)
        self.tasks = TaskRepository(session)
        self.status_logs = StatusTimeLogRepository(session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc is None:
                await self.commit()
            else:
                await self.rollback()
                if isinstance(exc, SQLAlchemyError):
                    logger.exception("Database error; transaction rolled back")
                    raise StorageException() from exc
        finally:
            if self._session is not None:
                await self._session.close()
                self._session = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work used outside 'async with'")
        return self._session

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Commit failed; transaction rolled back")
            raise StorageException() from e

    async def rollback(self) -> None:
        await self.session.rollback()
