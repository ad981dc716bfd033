"""WebSocket endpoint: /ws pushes status_changed events of the caller's tenant.

Uses only the ConnectionManager on app.state.ws_manager (set in create_app).
Requires a valid JWT via query param ?token=... before registering the
connection; the token's tenant_id scopes every message it receives.
"""

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from app.api.v1.dependencies import CurrentActor
from app.infrastructure.security.jwt import verify_token
from app.schemas.websocket import WebSocketStatusResponse

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Register the connection under the token's tenant until the client leaves.

    Incoming text is ignored except "ping", answered with "pong".
    """
    manager = websocket.app.state.ws_manager
    token = websocket.query_params.get("token")
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    try:
        claims = verify_token(token)
    except ValueError:
        await _reject_websocket(websocket, "Invalid token")
        return
    await manager.connect(websocket, claims.tenant_id)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)


@router.get("/ws/status", response_model=WebSocketStatusResponse)
async def websocket_status(request: Request, actor: CurrentActor) -> WebSocketStatusResponse:
    """Open connections for the caller's tenant and overall."""
    manager = request.app.state.ws_manager
    return WebSocketStatusResponse(
        tenant_id=actor.tenant_id,
        connections=await manager.get_connection_count(actor.tenant_id),
        total_connections=await manager.get_connection_count(),
    )
