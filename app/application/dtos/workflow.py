"""Commands and results for workflow definition use cases."""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.entities.workflow import StatusDefinition, TransitionRule
from app.domain.enums import RejectionCode


@dataclass(frozen=True)
class WorkflowDefinitionCommand:
    """Full content of a definition, used for both create and replace."""

    name: str
    statuses: list[StatusDefinition]
    transitions: list[TransitionRule] = field(default_factory=list)
    role_restrictions: dict[str, list[str]] = field(default_factory=dict)
    description: str | None = None
    is_default: bool = False


@dataclass(frozen=True)
class TransitionCheck:
    """Answer of the validate-transition probe."""

    valid: bool
    code: RejectionCode | None = None
    reason: str | None = None
