"""Domain events published after a committed status change."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.shared.utils.datetime import ensure_utc

STATUS_CHANGED = "status_changed"


@dataclass(frozen=True)
class StatusChangedEvent:
    """A task moved from one status to another."""

    tenant_id: str
    task_id: str
    from_status: str | None
    to_status: str
    at: datetime
    actor_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": STATUS_CHANGED,
            "tenant_id": self.tenant_id,
            "task_id": self.task_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "at": self.at.isoformat(),
            "actor_id": self.actor_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatusChangedEvent":
        at = data["at"]
        if isinstance(at, str):
            at = datetime.fromisoformat(at)
        return cls(
            tenant_id=data["tenant_id"],
            task_id=data["task_id"],
            from_status=data.get("from_status"),
            to_status=data["to_status"],
            at=ensure_utc(at),
            actor_id=data.get("actor_id"),
        )
