"""WebSocket connection manager for status_changed push.

Holds active connections per tenant and provides tenant-scoped broadcast.
Use via app.state.ws_manager (set in create_app). A connection only ever
receives events of the tenant named in its token.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tenant-isolated registry of WebSocket connections.

    Sends happen outside the lock on a snapshot; connections whose send
    fails are dropped afterwards.
    """

    def __init__(self) -> None:
        self._connections_by_tenant: dict[str, set[WebSocket]] = {}
        self._websocket_to_tenant: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, tenant_id: str) -> None:
        """Accept and register a new connection for the given tenant."""
        await websocket.accept()
        async with self._lock:
            self._connections_by_tenant.setdefault(tenant_id, set()).add(websocket)
            self._websocket_to_tenant[websocket] = tenant_id

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        """Remove a connection; caller holds the lock."""
        tenant_id = self._websocket_to_tenant.pop(websocket, None)
        if tenant_id is None:
            return
        conns = self._connections_by_tenant.get(tenant_id)
        if conns is None:
            return
        conns.discard(websocket)
        if not conns:
            del self._connections_by_tenant[tenant_id]

    async def broadcast_to_tenant(
        self, tenant_id: str, message: str | dict[str, Any]
    ) -> int:
        """Send a message to every connection of the tenant.

        Returns:
            Number of connections the message was delivered to.
        """
        async with self._lock:
            snapshot = list(self._connections_by_tenant.get(tenant_id, ()))
        dead: list[WebSocket] = []
        for ws in snapshot:
            try:
                if isinstance(message, dict):
                    await ws.send_json(message)
                else:
                    await ws.send_text(message)
            except Exception:
                logger.debug("Dropping WebSocket for tenant %s after failed send", tenant_id)
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)
        return len(snapshot) - len(dead)

    async def get_connection_count(self, tenant_id: str | None = None) -> int:
        """Active connections, for one tenant or in total."""
        async with self._lock:
            if tenant_id is not None:
                return len(self._connections_by_tenant.get(tenant_id, ()))
            return sum(len(c) for c in self._connections_by_tenant.values())
