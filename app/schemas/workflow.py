"""Workflow definition API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.application.dtos.workflow import TransitionCheck, WorkflowDefinitionCommand
from app.domain.entities.workflow import (
    StatusDefinition,
    TransitionRule,
    WorkflowDefinition,
)
from app.domain.enums import RejectionCode


class StatusSchema(BaseModel):
    """A node of the workflow graph."""

    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=128)
    order: int = Field(default=0, description="Display order; lowest is the initial status")
    color: str | None = Field(default=None, max_length=32)


class TransitionSchema(BaseModel):
    """Edges leaving one status."""

    from_status: str = Field(..., min_length=1, max_length=64)
    to_statuses: list[str] = Field(..., min_length=1)


class WorkflowDefinitionRequest(BaseModel):
    """Request body for POST /workflows and PUT /workflows/{id}."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    statuses: list[StatusSchema] = Field(..., min_length=1)
    transitions: list[TransitionSchema] = Field(default_factory=list)
    role_restrictions: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Edge key 'from->to' to the roles allowed on it; absent or empty means any role.",
    )
    is_default: bool = False

    def to_command(self) -> WorkflowDefinitionCommand:
        return WorkflowDefinitionCommand(
            name=self.name,
            description=self.description,
            statuses=[
                StatusDefinition(id=s.id, name=s.name, display_order=s.order, color=s.color)
                for s in self.statuses
            ],
            transitions=[TransitionRule.of(t.from_status, t.to_statuses) for t in self.transitions],
            role_restrictions=dict(self.role_restrictions),
            is_default=self.is_default,
        )


class WorkflowReplaceRequest(WorkflowDefinitionRequest):
    """Request body for PUT /workflows/{id}."""

    status_remap: dict[str, str] = Field(
        default_factory=dict,
        description="Old status id to new status id, for statuses the new graph drops.",
    )


class WorkflowDefinitionResponse(BaseModel):
    """Workflow definition response."""

    id: str
    tenant_id: str
    name: str
    description: str | None
    is_default: bool
    version: int
    initial_status: str
    statuses: list[StatusSchema]
    transitions: list[TransitionSchema]
    role_restrictions: dict[str, list[str]]
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_entity(cls, definition: WorkflowDefinition) -> "WorkflowDefinitionResponse":
        return cls(
            id=definition.id,
            tenant_id=definition.tenant_id,
            name=definition.name,
            description=definition.description,
            is_default=definition.is_default,
            version=definition.version,
            initial_status=definition.initial_status,
            statuses=[
                StatusSchema(id=s.id, name=s.name, order=s.display_order, color=s.color)
                for s in definition.ordered_statuses
            ],
            transitions=[
                TransitionSchema(
                    from_status=s.id,
                    to_statuses=sorted(definition.outgoing_edges(s.id)),
                )
                for s in definition.ordered_statuses
                if definition.outgoing_edges(s.id)
            ],
            role_restrictions={
                key: sorted(roles) for key, roles in definition.role_restrictions.items()
            },
            created_at=definition.created_at,
            updated_at=definition.updated_at,
        )


class ValidateTransitionRequest(BaseModel):
    """Request body for POST /workflows/{id}/validate-transition.

    role defaults to the caller's role.
    """

    from_status: str = Field(..., min_length=1)
    to_status: str = Field(..., min_length=1)
    role: str | None = None


class ValidateTransitionResponse(BaseModel):
    valid: bool
    code: RejectionCode | None = None
    reason: str | None = None

    @classmethod
    def from_check(cls, check: TransitionCheck) -> "ValidateTransitionResponse":
        return cls(valid=check.valid, code=check.code, reason=check.reason)


class AllowedTransitionsResponse(BaseModel):
    from_status: str
    role: str
    to_statuses: list[str]
