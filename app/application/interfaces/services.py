"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.interfaces.repositories import IUnitOfWork
    from app.domain.events import StatusChangedEvent


class IStatusChangePublisher(Protocol):
    """Outbound sink for committed status changes (fire-and-forget)."""

    async def publish_status_changed(self, event: StatusChangedEvent) -> bool:
        """Publish the event. Return False when it could not be delivered."""


type UnitOfWorkFactory = Callable[[], IUnitOfWork]
