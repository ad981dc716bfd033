"""Result values returned by the workflow core.

The validator, projector checks and orchestrator return one of these
instead of raising, so callers branch on the value (``result.valid``) and
the HTTP layer decides the status code.
"""

from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import RejectionCode


@dataclass(frozen=True)
class Admitted:
    """The requested transition is allowed."""

    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Rejection:
    """The request was refused; nothing was written.

    Attributes:
        code: Machine-readable reason.
        message: Human-readable reason, safe to show to end users.
        details: Extra context (statuses, role, task id).
    """

    code: RejectionCode
    message: str
    details: dict[str, Any] = field(default_factory=dict, hash=False)
    valid: bool = field(default=False, init=False)


ADMITTED = Admitted()

type ValidationResult = Admitted | Rejection
