"""Tests for /api/v1/calendar and /api/v1/schedules/occurrences."""

from httpx import AsyncClient


async def test_calendar_merges_tasks_in_date_order(
    client: AsyncClient, developer_headers: dict, workflow: dict
) -> None:
    later = await client.post(
        "/api/v1/tasks",
        json={"title": "Later", "due_date": "2024-03-20", "assignee_id": "dev-1"},
        headers=developer_headers,
    )
    earlier = await client.post(
        "/api/v1/tasks",
        json={
            "title": "Earlier",
            "assignee_id": "dev-2",
            "schedule": {"schedule_type": "monthly_day", "start_date": "2024-01-01", "monthly_day": 31},
        },
        headers=developer_headers,
    )
    assert later.status_code == earlier.status_code == 201

    response = await client.get(
        "/api/v1/calendar", params={"start": "2024-02-01", "end": "2024-03-31"}, headers=developer_headers
    )
    assert response.status_code == 200
    assert [(e["date"], e["title"]) for e in response.json()] == [
        ("2024-02-29", "Earlier"),
        ("2024-03-20", "Later"),
        ("2024-03-31", "Earlier"),
    ]
    assert response.json()[1]["status"] == "pending"

    mine = await client.get(
        "/api/v1/calendar",
        params={"start": "2024-02-01", "end": "2024-03-31", "assignee_id": "dev-1"},
        headers=developer_headers,
    )
    assert [e["task_id"] for e in mine.json()] == [later.json()["id"]]


async def test_calendar_is_tenant_scoped(
    client: AsyncClient, developer_headers: dict, other_tenant_headers: dict, workflow: dict
) -> None:
    await client.post("/api/v1/tasks", json={"title": "A", "due_date": "2024-01-05"}, headers=developer_headers)
    response = await client.get(
        "/api/v1/calendar", params={"start": "2024-01-01", "end": "2024-01-31"}, headers=other_tenant_headers
    )
    assert response.json() == []


async def test_calendar_range_is_bounded(client: AsyncClient, developer_headers: dict) -> None:
    response = await client.get(
        "/api/v1/calendar", params={"start": "2000-01-01", "end": "2099-12-31"}, headers=developer_headers
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "end"}


async def test_project_unsaved_schedule(client: AsyncClient, developer_headers: dict) -> None:
    response = await client.post(
        "/api/v1/schedules/occurrences",
        params={"start": "2024-01-01", "end": "2024-01-03"},
        json={
            "schedule": {
                "schedule_type": "daily_hours",
                "start_date": "2024-01-02",
                "windows": [{"start_time": "17:00", "end_time": "09:00"}],
            }
        },
        headers=developer_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert [o["date"] for o in body] == ["2024-01-02", "2024-01-03"]
    assert body[0]["is_inverted"] is True
    assert body[0]["duration_minutes"] == 0


async def test_inverted_query_range_is_empty(client: AsyncClient, developer_headers: dict) -> None:
    response = await client.post(
        "/api/v1/schedules/occurrences",
        params={"start": "2024-02-01", "end": "2024-01-01"},
        json={"schedule": {"schedule_type": "deadline", "due_date": "2024-01-15"}},
        headers=developer_headers,
    )
    assert response.status_code == 200
    assert response.json() == []
