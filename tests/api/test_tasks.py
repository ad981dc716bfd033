"""Tests for /api/v1/tasks: lifecycle, status changes and status-time reads."""

from httpx import AsyncClient


async def _create_task(client: AsyncClient, headers: dict, **body) -> dict:
    response = await client.post("/api/v1/tasks", json={"title": "Write report", **body}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _change(client: AsyncClient, task_id: str, status: str, headers: dict, **extra):
    return await client.put(
        f"/api/v1/tasks/{task_id}/status", json={"status": status, **extra}, headers=headers
    )


async def test_create_starts_in_initial_status(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers, assignee_id="dev-1")
    assert task["workflow_id"] == workflow["id"]
    assert task["status"] == "pending"
    assert task["version"] == 1
    assert task["completed_at"] is None


async def test_create_without_workflow_is_400(client: AsyncClient, developer_headers: dict) -> None:
    response = await client.post("/api/v1/tasks", json={"title": "A"}, headers=developer_headers)
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "workflow_id"}


async def test_create_with_unknown_status_is_409(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    response = await client.post(
        "/api/v1/tasks", json={"title": "A", "status": "archived"}, headers=developer_headers
    )
    assert response.status_code == 409
    assert response.json()["error"] == "UNKNOWN_STATUS"


async def test_requests_without_token_are_401(client: AsyncClient) -> None:
    response = await client.get("/api/v1/tasks")
    assert response.status_code == 401
    bad = await client.get("/api/v1/tasks", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "AUTHENTICATION_ERROR"


async def test_status_change_happy_path(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    started = await _change(client, task["id"], "in_progress", developer_headers)
    assert started.status_code == 200
    assert started.json()["status"] == "in_progress"
    assert started.json()["version"] == 2
    done = await _change(client, task["id"], "completed", developer_headers)
    assert done.json()["status"] == "completed"
    assert done.json()["completed_at"] is not None


async def test_restricted_edge_is_403_for_developer(
    client: AsyncClient, developer_headers: dict, admin_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    refused = await _change(client, task["id"], "cancelled", developer_headers)
    assert refused.status_code == 403
    body = refused.json()
    assert body["error"] == "FORBIDDEN"
    assert body["details"]["allowed_roles"] == ["admin"]

    allowed = await _change(client, task["id"], "cancelled", admin_headers)
    assert allowed.status_code == 200
    assert allowed.json()["status"] == "cancelled"


async def test_illegal_and_no_op_changes_are_409(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    illegal = await _change(client, task["id"], "completed", developer_headers)
    no_op = await _change(client, task["id"], "pending", developer_headers)
    unknown = await _change(client, task["id"], "archived", developer_headers)
    assert (illegal.status_code, illegal.json()["error"]) == (409, "ILLEGAL_TRANSITION")
    assert (no_op.status_code, no_op.json()["error"]) == (409, "NO_OP_TRANSITION")
    assert (unknown.status_code, unknown.json()["error"]) == (409, "UNKNOWN_STATUS")


async def test_expected_status_guard(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    await _change(client, task["id"], "in_progress", developer_headers)
    stale = await _change(
        client, task["id"], "completed", developer_headers, expected_status="pending"
    )
    assert stale.status_code == 409
    assert stale.json()["error"] == "CONCURRENT_MODIFICATION"


async def test_status_summary_and_timeline(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    await _change(client, task["id"], "in_progress", developer_headers)

    summary = await client.get(f"/api/v1/tasks/{task['id']}/status-summary", headers=developer_headers)
    assert summary.status_code == 200
    body = summary.json()
    assert set(body["totals"]) == {"pending", "in_progress"}
    assert all(seconds >= 0 for seconds in body["totals"].values())
    current = [row["status"] for row in body["statuses"] if row["is_current"]]
    assert current == ["in_progress"]

    timeline = await client.get(f"/api/v1/tasks/{task['id']}/status-timeline", headers=developer_headers)
    entries = timeline.json()["entries"]
    assert [(e["from_status"], e["to_status"]) for e in entries] == [
        (None, "pending"),
        ("pending", "in_progress"),
    ]
    assert entries[0]["exited_at"] is not None
    assert entries[1]["exited_at"] is None
    assert entries[1]["actor_id"] == "dev-1"


async def test_status_summary_as_of_far_future(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    response = await client.get(
        f"/api/v1/tasks/{task['id']}/status-summary",
        params={"as_of": "2999-01-01T00:00:00Z"},
        headers=developer_headers,
    )
    assert response.json()["totals"]["pending"] > 0


async def test_patch_edits_details_not_status(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    response = await client.patch(
        f"/api/v1/tasks/{task['id']}",
        json={"title": "Renamed", "assignee_id": "dev-2"},
        headers=developer_headers,
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"
    assert response.json()["assignee_id"] == "dev-2"
    assert response.json()["status"] == "pending"


async def test_list_filters_and_delete(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    mine = await _create_task(client, developer_headers, assignee_id="dev-1")
    await _create_task(client, developer_headers, assignee_id="dev-2")
    listed = await client.get("/api/v1/tasks", params={"assignee_id": "dev-1"}, headers=developer_headers)
    assert [t["id"] for t in listed.json()] == [mine["id"]]

    deleted = await client.delete(f"/api/v1/tasks/{mine['id']}", headers=developer_headers)
    assert deleted.status_code == 204
    missing = await client.get(f"/api/v1/tasks/{mine['id']}", headers=developer_headers)
    assert missing.status_code == 404


async def test_tasks_are_tenant_isolated(
    client: AsyncClient, developer_headers: dict, other_tenant_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    read = await client.get(f"/api/v1/tasks/{task['id']}", headers=other_tenant_headers)
    change = await _change(client, task["id"], "in_progress", other_tenant_headers)
    summary = await client.get(f"/api/v1/tasks/{task['id']}/status-summary", headers=other_tenant_headers)
    assert read.status_code == 404
    assert change.status_code == 404
    assert summary.status_code == 404
    listed = await client.get("/api/v1/tasks", headers=other_tenant_headers)
    assert listed.json() == []


async def test_schedule_update_and_occurrences(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    schedule = {
        "schedule_type": "weekly_days",
        "start_date": "2024-01-01",
        "slots": [
            {"day_of_week": 1, "start_time": "09:00", "end_time": "10:30"},
            {"day_of_week": 3},
        ],
    }
    updated = await client.put(
        f"/api/v1/tasks/{task['id']}/schedule", json={"schedule": schedule}, headers=developer_headers
    )
    assert updated.status_code == 200
    assert updated.json()["schedule"]["slots"][0] == {
        "day_of_week": 1,
        "start_time": "09:00",
        "end_time": "10:30",
    }

    occurrences = await client.get(
        f"/api/v1/tasks/{task['id']}/occurrences",
        params={"start": "2024-01-01", "end": "2024-01-14"},
        headers=developer_headers,
    )
    assert [o["date"] for o in occurrences.json()] == [
        "2024-01-01",
        "2024-01-03",
        "2024-01-08",
        "2024-01-10",
    ]
    assert occurrences.json()[0]["duration_minutes"] == 90
    assert occurrences.json()[1]["is_all_day"] is True


async def test_inverted_schedule_range_is_422(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    task = await _create_task(client, developer_headers)
    response = await client.put(
        f"/api/v1/tasks/{task['id']}/schedule",
        json={
            "schedule": {
                "schedule_type": "daily_hours",
                "start_date": "2024-02-01",
                "end_date": "2024-01-01",
                "windows": [{}],
            }
        },
        headers=developer_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_SCHEDULE_RANGE"


async def test_unknown_schedule_type_is_422(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    response = await client.post(
        "/api/v1/tasks",
        json={"title": "A", "schedule": {"schedule_type": "hourly", "start_date": "2024-01-01"}},
        headers=developer_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_schedule_time_with_offset_is_400(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    response = await client.post(
        "/api/v1/tasks",
        json={
            "title": "A",
            "schedule": {
                "schedule_type": "daily_hours",
                "start_date": "2024-01-01",
                "windows": [{"start_time": "09:00+02:00", "end_time": "10:00"}],
            },
        },
        headers=developer_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    assert response.json()["details"]["field"] == "schedule"
