"""Pytest configuration and fixtures for taskflow.

Forces the in-memory backend (no Postgres or Redis needed) before app.main
is imported, and mints tokens with create_access_token. All imports use app.*.
"""

import copy
import os

os.environ["DATABASE_BACKEND"] = "memory"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["REDIS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.infrastructure.memory import InMemoryStore, MemoryUnitOfWork  # noqa: E402
from app.infrastructure.security.jwt import create_access_token  # noqa: E402
from app.main import app  # noqa: E402

TENANT_ID = "tenant-a"
OTHER_TENANT_ID = "tenant-b"

# pending -> in_progress -> completed, in_progress -> cancelled,
# pending -> cancelled (admin only)
TASK_WORKFLOW = {
    "name": "Task workflow",
    "statuses": [
        {"id": "pending", "name": "Pending", "order": 0},
        {"id": "in_progress", "name": "In progress", "order": 1},
        {"id": "completed", "name": "Completed", "order": 2},
        {"id": "cancelled", "name": "Cancelled", "order": 3},
    ],
    "transitions": [
        {"from_status": "pending", "to_statuses": ["in_progress", "cancelled"]},
        {"from_status": "in_progress", "to_statuses": ["completed", "cancelled"]},
    ],
    "role_restrictions": {"pending->cancelled": ["admin"]},
}


def bearer(actor_id: str, role: str, tenant_id: str = TENANT_ID) -> dict[str, str]:
    token = create_access_token({"sub": actor_id, "role": role, "tenant_id": tenant_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Each test starts with an empty in-memory store."""
    app.state.memory_store.clear()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer("admin-1", "admin")


@pytest.fixture
def developer_headers() -> dict[str, str]:
    return bearer("dev-1", "developer")


@pytest.fixture
def other_tenant_headers() -> dict[str, str]:
    return bearer("admin-9", "admin", tenant_id=OTHER_TENANT_ID)


@pytest.fixture
async def workflow(client: AsyncClient, admin_headers: dict[str, str]) -> dict:
    """TASK_WORKFLOW created through the API (the tenant's default)."""
    response = await client.post("/api/v1/workflows", json=TASK_WORKFLOW, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh store for unit tests that bypass the app."""
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore):
    return lambda: MemoryUnitOfWork(store, lock_timeout_seconds=0.5)


@pytest.fixture
def make_headers():
    """Factory for Authorization headers: make_headers(actor_id, role, tenant_id=...)."""
    return bearer


@pytest.fixture
def workflow_payload() -> dict:
    """Request body for TASK_WORKFLOW (fresh copy per test)."""
    return copy.deepcopy(TASK_WORKFLOW)
