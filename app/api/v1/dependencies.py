"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller's identity and the application
use cases. All use cases are built from infrastructure implementations
here; routes depend only on these dependencies, not on infra directly.

When database_backend is 'postgres', units of work wrap an SQLAlchemy
session. When database_backend is 'memory', they wrap the process-local
store on app.state.memory_store. Switch backends via DATABASE_BACKEND.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.interfaces.services import (
    IStatusChangePublisher,
    UnitOfWorkFactory,
)
from app.application.use_cases.schedules import ScheduleQueryService
from app.application.use_cases.status_time import StatusTimeQueryService
from app.application.use_cases.tasks import TaskService, WorkflowOrchestrator
from app.application.use_cases.workflows import WorkflowDefinitionService
from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.memory import InMemoryStore, MemoryUnitOfWork
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from app.infrastructure.security.jwt import TokenClaims, verify_token

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> TokenClaims:
    """Identity from the Bearer JWT; 401 if missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        return verify_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e)) from e


async def require_workflow_admin(
    actor: Annotated[TokenClaims, Depends(get_current_actor)],
) -> TokenClaims:
    """Caller must hold one of settings.workflow_admin_roles."""
    if actor.role not in get_settings().admin_roles:
        raise AuthorizationException("workflow", "manage")
    return actor


def get_uow_factory(request: Request) -> UnitOfWorkFactory:
    """Unit-of-work factory for the configured backend."""
    settings = get_settings()
    timeout = settings.transition_lock_timeout_seconds
    if settings.database_backend == "memory":
        store: InMemoryStore = request.app.state.memory_store
        return lambda: MemoryUnitOfWork(store, timeout)
    session_factory = get_session_factory()
    return lambda: SqlAlchemyUnitOfWork(session_factory, timeout)


def get_status_publisher(request: Request) -> IStatusChangePublisher | None:
    """Publisher set in create_app / lifespan (Redis or in-process)."""
    return getattr(request.app.state, "status_publisher", None)


def get_workflow_orchestrator(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    publisher: Annotated[IStatusChangePublisher | None, Depends(get_status_publisher)],
) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(uow_factory, publisher=publisher)


def get_workflow_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    publisher: Annotated[IStatusChangePublisher | None, Depends(get_status_publisher)],
) -> WorkflowDefinitionService:
    return WorkflowDefinitionService(uow_factory, publisher=publisher)


def get_task_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> TaskService:
    return TaskService(uow_factory)


def get_schedule_query_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> ScheduleQueryService:
    return ScheduleQueryService(uow_factory, get_settings().max_projection_days)


def get_status_time_query_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> StatusTimeQueryService:
    return StatusTimeQueryService(uow_factory)


CurrentActor = Annotated[TokenClaims, Depends(get_current_actor)]
WorkflowAdmin = Annotated[TokenClaims, Depends(require_workflow_admin)]
