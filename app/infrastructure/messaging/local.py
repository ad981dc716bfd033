"""In-process status_changed publisher used when Redis is disabled.

Reaches only the WebSocket clients connected to this process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain.events import StatusChangedEvent

if TYPE_CHECKING:
    from app.api.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)


class InProcessStatusChangePublisher:
    """Implements IStatusChangePublisher by broadcasting straight to the connection manager."""

    def __init__(self, manager: ConnectionManager) -> None:
        self.manager = manager

    async def publish_status_changed(self, event: StatusChangedEvent) -> bool:
        delivered = await self.manager.broadcast_to_tenant(event.tenant_id, event.to_dict())
        logger.debug(
            "status_changed for task %s pushed to %d local connection(s)",
            event.task_id,
            delivered,
        )
        return True
