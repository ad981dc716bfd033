"""Decides whether a status change is allowed by a workflow definition.

Pure: no I/O, no clock, no mutation. Returns Admitted or a Rejection;
never raises for an expected refusal.
"""

from __future__ import annotations

from typing import Any

from app.domain.entities.workflow import WorkflowDefinition, edge_key
from app.domain.enums import RejectionCode
from app.domain.value_objects.results import ADMITTED, Rejection, ValidationResult


def _reject(code: RejectionCode, message: str, **details: Any) -> Rejection:
    """Build a Rejection with details, dropping None values."""
    return Rejection(
        code=code,
        message=message,
        details={k: v for k, v in details.items() if v is not None},
    )


class TransitionValidator:
    """Checks a requested edge against the graph and the edge's role restriction.

    Order of checks (first failure wins): no-op, missing edge, role
    restriction. check() adds an UNKNOWN_STATUS guard in front for callers
    whose statuses come from stored or client data.
    """

    def validate(
        self,
        definition: WorkflowDefinition,
        from_status: str,
        to_status: str,
        actor_role: str,
    ) -> ValidationResult:
        if from_status == to_status:
            return _reject(
                RejectionCode.NO_OP_TRANSITION,
                f"Task is already in status '{to_status}'.",
                from_status=from_status,
                to_status=to_status,
            )
        if to_status not in definition.outgoing_edges(from_status):
            return _reject(
                RejectionCode.ILLEGAL_TRANSITION,
                f"Cannot move from '{from_status}' to '{to_status}'.",
                from_status=from_status,
                to_status=to_status,
                allowed=sorted(definition.outgoing_edges(from_status)),
            )
        roles = definition.allowed_roles(from_status, to_status)
        if roles and actor_role not in roles:
            return _reject(
                RejectionCode.FORBIDDEN,
                f"Role '{actor_role}' may not move a task from '{from_status}' "
                f"to '{to_status}'.",
                from_status=from_status,
                to_status=to_status,
                edge=edge_key(from_status, to_status),
                allowed_roles=sorted(roles),
            )
        return ADMITTED

    def check(
        self,
        definition: WorkflowDefinition,
        from_status: str,
        to_status: str,
        actor_role: str,
    ) -> ValidationResult:
        """validate() preceded by a check that both statuses are declared."""
        for status in (from_status, to_status):
            if not definition.has_status(status):
                return _reject(
                    RejectionCode.UNKNOWN_STATUS,
                    f"Status '{status}' is not part of workflow '{definition.name}'.",
                    status=status,
                    workflow_id=definition.id,
                )
        return self.validate(definition, from_status, to_status, actor_role)

    def allowed_targets(
        self,
        definition: WorkflowDefinition,
        from_status: str,
        actor_role: str,
    ) -> list[str]:
        """Statuses actor_role could move to from from_status, in display order."""
        return [
            status
            for status in definition.status_ids
            if self.validate(definition, from_status, status, actor_role).valid
        ]
