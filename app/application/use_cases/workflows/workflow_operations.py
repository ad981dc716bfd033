"""Workflow definition use cases: create, replace, delete, read and probes."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from app.application.dtos.workflow import TransitionCheck, WorkflowDefinitionCommand
from app.application.interfaces.repositories import IUnitOfWork
from app.application.interfaces.services import (
    IStatusChangePublisher,
    UnitOfWorkFactory,
)
from app.application.services.status_time_tracker import StatusTimeTracker
from app.application.services.transition_validator import TransitionValidator
from app.application.use_cases.tasks.change_status import publish_quietly
from app.domain.entities.workflow import WorkflowDefinition
from app.domain.events import StatusChangedEvent
from app.domain.exceptions import (
    OrphanedStatusException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects.results import Rejection
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


def _build_definition(
    command: WorkflowDefinitionCommand,
    *,
    definition_id: str,
    tenant_id: str,
    is_default: bool,
    version: int,
    created_at: datetime,
    updated_at: datetime,
) -> WorkflowDefinition:
    """Construct a definition, turning structural errors into ValidationException."""
    if not command.name.strip():
        raise ValidationException("Workflow name must not be empty", field="name")
    try:
        return WorkflowDefinition(
            id=definition_id,
            tenant_id=tenant_id,
            name=command.name.strip(),
            description=command.description,
            statuses=tuple(command.statuses),
            transitions=tuple(command.transitions),
            role_restrictions={
                key: frozenset(roles) for key, roles in command.role_restrictions.items()
            },
            is_default=is_default,
            version=version,
            created_at=created_at,
            updated_at=updated_at,
        )
    except ValueError as e:
        raise ValidationException(str(e), field="workflow") from e


class WorkflowDefinitionService:
    """Manages the workflow definitions of a tenant.

    At most one definition per tenant is the default. The first definition
    created in a tenant becomes the default whatever the command says.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        publisher: IStatusChangePublisher | None = None,
        validator: TransitionValidator | None = None,
        tracker: StatusTimeTracker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._publisher = publisher
        self._validator = validator or TransitionValidator()
        self._tracker = tracker or StatusTimeTracker()
        self._clock = clock

    async def create(
        self, tenant_id: str, command: WorkflowDefinitionCommand
    ) -> WorkflowDefinition:
        now = self._clock()
        async with self._uow_factory() as uow:
            has_default = await uow.workflows.get_default(tenant_id) is not None
            definition = _build_definition(
                command,
                definition_id=generate_cuid(),
                tenant_id=tenant_id,
                is_default=command.is_default or not has_default,
                version=1,
                created_at=now,
                updated_at=now,
            )
            if definition.is_default and has_default:
                await uow.workflows.clear_default(tenant_id, except_id=definition.id)
            created = await uow.workflows.add(definition)
        logger.info("Workflow %s created (default=%s)", created.id, created.is_default)
        return created

    async def replace(
        self,
        tenant_id: str,
        definition_id: str,
        command: WorkflowDefinitionCommand,
        actor_id: str | None = None,
        status_remap: dict[str, str] | None = None,
    ) -> WorkflowDefinition:
        """Swap a definition for a new version in one transaction.

        The definition is locked before statuses in use are read, so status
        changes and task creation bound to it wait for the swap.

        Statuses dropped by the new graph but still held by bound tasks must
        each be mapped by status_remap to a status of the new graph. Those
        tasks are moved in the same transaction and each move is written to
        their status ledger with actor_id.

        Raises:
            ResourceNotFoundException: No such definition in tenant.
            ValidationException: New graph is malformed or a remap target is undeclared.
            OrphanedStatusException: A dropped status in use has no remap.
        """
        remap = dict(status_remap or {})
        moved: list[StatusChangedEvent] = []
        async with self._uow_factory() as uow:
            current = await uow.workflows.get_for_update(definition_id, tenant_id)
            if current is None:
                raise ResourceNotFoundException("workflow", definition_id)
            now = self._clock()
            new = _build_definition(
                command,
                definition_id=current.id,
                tenant_id=tenant_id,
                is_default=current.is_default or command.is_default,
                version=current.version + 1,
                created_at=current.created_at or now,
                updated_at=now,
            )
            for old_status, target in remap.items():
                if not new.has_status(target):
                    raise ValidationException(
                        f"status_remap target '{target}' for '{old_status}' is not a status of the new workflow",
                        field="status_remap",
                    )

            in_use = await uow.tasks.statuses_in_use(tenant_id, current.id)
            orphaned = sorted(s for s in in_use if not new.has_status(s))
            missing = [s for s in orphaned if s not in remap]
            if missing:
                raise OrphanedStatusException(current.id, missing)

            if orphaned:
                moved = await self._move_orphaned_tasks(
                    uow, tenant_id, new, orphaned, remap, actor_id, now
                )
            if new.is_default and not current.is_default:
                await uow.workflows.clear_default(tenant_id, except_id=new.id)
            replaced = await uow.workflows.replace(new)

        logger.info(
            "Workflow %s replaced with version %s (%s task(s) remapped)",
            replaced.id,
            replaced.version,
            len(moved),
        )
        for event in moved:
            await publish_quietly(self._publisher, event)
        return replaced

    async def _move_orphaned_tasks(
        self,
        uow: IUnitOfWork,
        tenant_id: str,
        new: WorkflowDefinition,
        orphaned: list[str],
        remap: dict[str, str],
        actor_id: str | None,
        now: datetime,
    ) -> list[StatusChangedEvent]:
        events: list[StatusChangedEvent] = []
        for task in await uow.tasks.list_by_tenant(tenant_id, workflow_id=new.id):
            if task.status not in orphaned:
                continue
            locked = await uow.tasks.get_for_update(task.id, tenant_id)
            if locked is None or locked.status not in orphaned:
                continue
            target = remap[locked.status]
            record = self._tracker.record_transition(
                await uow.status_logs.get_open_entries(locked.id),
                locked.id,
                target,
                actor_id,
                now,
                previous_status=locked.status,
            )
            for closed in record.closed_entries:
                await uow.status_logs.close(closed)
            await uow.status_logs.append(record.opened_entry)
            await uow.tasks.update(
                locked.with_status(target, at=now, completed=new.is_terminal(target)),
                expected_version=locked.version,
            )
            events.append(
                StatusChangedEvent(
                    tenant_id=tenant_id,
                    task_id=locked.id,
                    from_status=locked.status,
                    to_status=target,
                    at=now,
                    actor_id=actor_id,
                )
            )
        return events

    async def delete(self, tenant_id: str, definition_id: str) -> None:
        """Delete a definition that is neither the default nor bound to tasks."""
        async with self._uow_factory() as uow:
            current = await uow.workflows.get_for_update(definition_id, tenant_id)
            if current is None:
                raise ResourceNotFoundException("workflow", definition_id)
            if current.is_default:
                raise ValidationException(
                    "Cannot delete the default workflow", field="workflow_id"
                )
            bound = await uow.tasks.count_by_workflow(tenant_id, definition_id)
            if bound:
                raise ValidationException(
                    f"Cannot delete a workflow used by {bound} task(s)",
                    field="workflow_id",
                )
            await uow.workflows.delete(definition_id, tenant_id)
        logger.info("Workflow %s deleted", definition_id)

    async def get(self, tenant_id: str, definition_id: str) -> WorkflowDefinition:
        async with self._uow_factory() as uow:
            definition = await uow.workflows.get_by_id(definition_id, tenant_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", definition_id)
        return definition

    async def get_default(self, tenant_id: str) -> WorkflowDefinition:
        async with self._uow_factory() as uow:
            definition = await uow.workflows.get_default(tenant_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", "default")
        return definition

    async def list_definitions(self, tenant_id: str) -> list[WorkflowDefinition]:
        async with self._uow_factory() as uow:
            return await uow.workflows.list_by_tenant(tenant_id)

    async def validate_transition(
        self,
        tenant_id: str,
        definition_id: str,
        from_status: str,
        to_status: str,
        actor_role: str,
    ) -> TransitionCheck:
        """Speculative check of one edge for a role; writes nothing."""
        definition = await self.get(tenant_id, definition_id)
        verdict = self._validator.check(definition, from_status, to_status, actor_role)
        if isinstance(verdict, Rejection):
            return TransitionCheck(valid=False, code=verdict.code, reason=verdict.message)
        return TransitionCheck(valid=True)

    async def allowed_targets(
        self,
        tenant_id: str,
        definition_id: str,
        from_status: str,
        actor_role: str,
    ) -> list[str]:
        definition = await self.get(tenant_id, definition_id)
        if not definition.has_status(from_status):
            raise ValidationException(
                f"Status '{from_status}' is not part of workflow '{definition.name}'",
                field="from_status",
            )
        return self._validator.allowed_targets(definition, from_status, actor_role)
