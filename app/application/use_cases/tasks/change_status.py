"""Status change use case: validate, lock, write ledger and task together, then publish."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from app.application.interfaces.services import (
    IStatusChangePublisher,
    UnitOfWorkFactory,
)
from app.application.services.status_time_tracker import StatusTimeTracker
from app.application.services.transition_validator import TransitionValidator
from app.domain.entities.task import TaskEntity
from app.domain.enums import RejectionCode
from app.domain.events import StatusChangedEvent
from app.domain.exceptions import (
    ConcurrentModificationException,
    ResourceNotFoundException,
)
from app.domain.value_objects.results import Rejection
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.telemetry import get_tracer
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)
tracer = get_tracer(__name__)


async def publish_quietly(
    publisher: IStatusChangePublisher | None, event: StatusChangedEvent
) -> None:
    """Publish after commit; a failed publish is logged and never undoes the change."""
    if publisher is None:
        return
    try:
        delivered = await publisher.publish_status_changed(event)
    except Exception:
        logger.exception(
            "Publishing status_changed failed for task %s (%s -> %s)",
            event.task_id,
            event.from_status,
            event.to_status,
        )
        return
    if not delivered:
        logger.warning("status_changed for task %s was not delivered", event.task_id)


class WorkflowOrchestrator:
    """Applies status changes to tasks.

    One change per task is in flight at a time: the task is loaded under an
    exclusive lock, so a concurrent request waits and is then validated
    against the status the first one left behind. The task's workflow is
    read for share, so a replacement of it cannot commit in between.
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

    async def change_status(
        self,
        tenant_id: str,
        task_id: str,
        to_status: str,
        actor_role: str,
        actor_id: str | None,
        *,
        now: datetime | None = None,
        expected_status: str | None = None,
    ) -> TaskEntity | Rejection:
        """Move task_id to to_status on behalf of the actor.

        Returns the updated task, or a Rejection when the change is refused
        (nothing is written in that case).

        Raises:
            ResourceNotFoundException: Task or its workflow does not exist in tenant.
            StorageException: Backend failure; nothing was committed.
        """
        with tracer.start_as_current_span("workflow.change_status") as span:
            span.set_attribute("taskflow.task_id", task_id)
            span.set_attribute("taskflow.to_status", to_status)
            try:
                async with self._uow_factory() as uow:
                    # Workflow before task, the order replace() locks them in.
                    unlocked = await uow.tasks.get_by_id(task_id, tenant_id)
                    if unlocked is None:
                        raise ResourceNotFoundException("task", task_id)
                    definition = await uow.workflows.get_for_share(
                        unlocked.workflow_id, tenant_id
                    )
                    if definition is None:
                        raise ResourceNotFoundException("workflow", unlocked.workflow_id)
                    task = await uow.tasks.get_for_update(task_id, tenant_id)
                    if task is None:
                        raise ResourceNotFoundException("task", task_id)
                    from_status = task.status
                    if expected_status is not None and expected_status != from_status:
                        return self._rejected(
                            task_id,
                            Rejection(
                                code=RejectionCode.CONCURRENT_MODIFICATION,
                                message="Task status changed since it was read; reload and retry.",
                                details={
                                    "expected_status": expected_status,
                                    "current_status": from_status,
                                },
                            ),
                        )

                    verdict = self._validator.check(
                        definition, from_status, to_status, actor_role
                    )
                    if isinstance(verdict, Rejection):
                        return self._rejected(task_id, verdict)

                    at = now or self._clock()
                    open_entries = await uow.status_logs.get_open_entries(task.id)
                    record = self._tracker.record_transition(
                        open_entries,
                        task.id,
                        to_status,
                        actor_id,
                        at,
                        previous_status=from_status,
                    )
                    for closed in record.closed_entries:
                        await uow.status_logs.close(closed)
                    await uow.status_logs.append(record.opened_entry)
                    updated = await uow.tasks.update(
                        task.with_status(
                            to_status, at=at, completed=definition.is_terminal(to_status)
                        ),
                        expected_version=task.version,
                    )
            except ConcurrentModificationException as e:
                return self._rejected(
                    task_id,
                    Rejection(
                        code=RejectionCode.CONCURRENT_MODIFICATION,
                        message=e.message,
                        details=e.details,
                    ),
                )

        logger.info(
            "Task %s moved %s -> %s by %s (%s)",
            task_id,
            from_status,
            to_status,
            actor_id,
            actor_role,
        )
        await publish_quietly(
            self._publisher,
            StatusChangedEvent(
                tenant_id=tenant_id,
                task_id=task_id,
                from_status=from_status,
                to_status=to_status,
                at=at,
                actor_id=actor_id,
            ),
        )
        return updated

    @staticmethod
    def _rejected(task_id: str, rejection: Rejection) -> Rejection:
        logger.info(
            "Status change for task %s rejected: %s", task_id, rejection.code.value
        )
        return rejection
