"""WebSocket API schemas."""

from pydantic import BaseModel, Field


class WebSocketStatusResponse(BaseModel):
    """Response for GET /ws/status (connection count for the caller's tenant)."""

    tenant_id: str
    connections: int = Field(..., description="Open WebSocket connections in the tenant")
    total_connections: int = Field(..., description="Open WebSocket connections overall")
