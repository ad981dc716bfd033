"""Workflow definition repository (SQLAlchemy). Implements IWorkflowDefinitionRepository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.workflow import (
    StatusDefinition,
    TransitionRule,
    WorkflowDefinition,
)
from app.domain.exceptions import ConcurrentModificationException
from app.infrastructure.persistence.models.workflow_definition import (
    WorkflowDefinitionModel,
)
from app.infrastructure.persistence.repositories.base import (
    BaseRepository,
    is_lock_timeout,
)
from app.shared.utils.datetime import ensure_utc


def statuses_to_json(definition: WorkflowDefinition) -> list[dict[str, Any]]:
    return [
        {"id": s.id, "name": s.name, "order": s.display_order, "color": s.color}
        for s in definition.statuses
    ]


def transitions_to_json(definition: WorkflowDefinition) -> list[dict[str, Any]]:
    return [
        {"from": rule.from_status, "to": sorted(rule.to_statuses)}
        for rule in definition.transitions
    ]


def restrictions_to_json(definition: WorkflowDefinition) -> dict[str, list[str]]:
    return {key: sorted(roles) for key, roles in definition.role_restrictions.items()}


def _to_entity(row: WorkflowDefinitionModel) -> WorkflowDefinition:
    """Map WorkflowDefinitionModel ORM to the domain entity."""
    return WorkflowDefinition(
        id=row.id,
        tenant_id=row.tenant_id,
        name=row.name,
        description=row.description,
        is_default=row.is_default,
        version=row.version,
        statuses=tuple(
            StatusDefinition(
                id=s["id"],
                name=s.get("name") or s["id"],
                display_order=int(s.get("order", 0)),
                color=s.get("color"),
            )
            for s in row.statuses
        ),
        transitions=tuple(
            TransitionRule.of(t["from"], t.get("to") or []) for t in row.transitions or []
        ),
        role_restrictions={
            key: frozenset(roles) for key, roles in (row.role_restrictions or {}).items()
        },
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


class WorkflowDefinitionRepository(BaseRepository[WorkflowDefinitionModel]):
    """Workflow definitions of a tenant, stored as JSONB graphs."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowDefinitionModel)

    async def get_by_id(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        row = await self._get_row(definition_id, tenant_id)
        return _to_entity(row) if row else None

    async def get_for_share(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        row = await self._get_row(definition_id, tenant_id, for_update=True, read=True)
        return _to_entity(row) if row else None

    async def get_for_update(
        self, definition_id: str, tenant_id: str
    ) -> WorkflowDefinition | None:
        row = await self._get_row(definition_id, tenant_id, for_update=True)
        return _to_entity(row) if row else None

    async def get_default(self, tenant_id: str) -> WorkflowDefinition | None:
        result = await self.db.execute(
            select(WorkflowDefinitionModel).where(
                WorkflowDefinitionModel.tenant_id == tenant_id,
                WorkflowDefinitionModel.is_default.is_(True),
            )
        )
        row = result.scalars().first()
        return _to_entity(row) if row else None

    async def list_by_tenant(self, tenant_id: str) -> list[WorkflowDefinition]:
        result = await self.db.execute(
            select(WorkflowDefinitionModel)
            .where(WorkflowDefinitionModel.tenant_id == tenant_id)
            .order_by(WorkflowDefinitionModel.name, WorkflowDefinitionModel.id)
        )
        return [_to_entity(row) for row in result.scalars().all()]

    async def add(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        row = WorkflowDefinitionModel(
            id=definition.id,
            tenant_id=definition.tenant_id,
            name=definition.name,
            description=definition.description,
            is_default=definition.is_default,
            version=definition.version,
            statuses=statuses_to_json(definition),
            transitions=transitions_to_json(definition),
            role_restrictions=restrictions_to_json(definition),
            created_at=definition.created_at,
            updated_at=definition.updated_at,
        )
        await self._add_row(row)
        return definition

    async def replace(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Single-row swap guarded by the previous version."""
        result = await self.db.execute(
            update(WorkflowDefinitionModel)
            .where(
                WorkflowDefinitionModel.id == definition.id,
                WorkflowDefinitionModel.tenant_id == definition.tenant_id,
                WorkflowDefinitionModel.version == definition.version - 1,
            )
            .values(
                name=definition.name,
                description=definition.description,
                is_default=definition.is_default,
                version=definition.version,
                statuses=statuses_to_json(definition),
                transitions=transitions_to_json(definition),
                role_restrictions=restrictions_to_json(definition),
                updated_at=definition.updated_at,
            )
        )
        if result.rowcount == 0:
            raise ConcurrentModificationException(definition.id, "version mismatch")
        return definition

    async def delete(self, definition_id: str, tenant_id: str) -> bool:
        row = await self._get_row(definition_id, tenant_id)
        if row is None:
            return False
        await self._delete_row(row)
        return True

    async def clear_default(self, tenant_id: str, except_id: str | None = None) -> None:
        stmt = update(WorkflowDefinitionModel).where(
            WorkflowDefinitionModel.tenant_id == tenant_id,
            WorkflowDefinitionModel.is_default.is_(True),
        )
        if except_id is not None:
            stmt = stmt.where(WorkflowDefinitionModel.id != except_id)
        try:
            await self.db.execute(stmt.values(is_default=False))
        except DBAPIError as e:
            # Held FOR SHARE by an in-flight status change.
            if is_lock_timeout(e):
                raise ConcurrentModificationException(tenant_id, "lock timeout") from e
            raise
