"""Tests for task status rules and the task admin API."""
from datetime import time

import pytest

from fieldops.models.task import TaskStatus
from fieldops.services.task_service import compute_task_status, is_within_work_hours


def test_work_hours_window_is_inclusive():
    start, end = time(8, 0), time(17, 0)
    assert is_within_work_hours(start, end, time(8, 0))
    assert is_within_work_hours(start, end, time(17, 0, 0, 500))
    assert is_within_work_hours(start, end, time(12, 30))
    assert not is_within_work_hours(start, end, time(7, 59, 59))
    assert not is_within_work_hours(start, end, time(17, 0, 1))


def test_work_hours_default_to_settings():
    assert is_within_work_hours(None, None, time(9, 0))
    assert not is_within_work_hours(None, None, time(22, 0))


def test_manual_status_wins_over_work_hours():
    assert compute_task_status(TaskStatus.COMPLETED, True, time(8), time(17), time(10)) == TaskStatus.COMPLETED
    assert compute_task_status(TaskStatus.PENDING, True, time(8), time(17), time(23)) == TaskStatus.PENDING


def test_automatic_status_follows_work_hours():
    assert compute_task_status(TaskStatus.PENDING, False, time(8), time(17), time(10)) == TaskStatus.ACTIVE
    assert compute_task_status(TaskStatus.ACTIVE, False, time(8), time(17), time(20)) == TaskStatus.INACTIVE


@pytest.mark.asyncio
async def test_create_task_gets_ticket_and_auto_mode(client, admin_headers):
    response = await client.post(
        "/api/admin/tasks",
        json={"title": "Inspect pump", "location": "North Yard", "start_time": "07:00:00", "end_time": "15:00:00"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["ticket_number"] == "TSK-000001"
    assert body["manual_override"] is False
    assert body["computed_status"] in ("active", "inactive")
    assert body["start_time"] == "07:00:00"


@pytest.mark.asyncio
async def test_explicit_status_switches_to_manual(client, admin_headers):
    created = await client.post(
        "/api/admin/tasks", json={"title": "Fence repair", "status": "completed"}, headers=admin_headers
    )
    body = created.json()
    assert body["manual_override"] is True
    assert body["computed_status"] == "completed"

    reset = await client.post(f"/api/admin/tasks/{body['id']}/reset-auto", headers=admin_headers)
    assert reset.json()["manual_override"] is False
    assert reset.json()["computed_status"] in ("active", "inactive")

    updated = await client.put(
        f"/api/admin/tasks/{body['id']}", json={"status": "pending"}, headers=admin_headers
    )
    assert updated.json()["manual_override"] is True
    assert updated.json()["computed_status"] == "pending"


@pytest.mark.asyncio
async def test_end_time_must_follow_start_time(client, admin_headers):
    response = await client.post(
        "/api/admin/tasks",
        json={"title": "Backwards", "start_time": "15:00:00", "end_time": "09:00:00"},
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_fields(client, admin_headers):
    task = (await client.post("/api/admin/tasks", json={"title": "Valve check"}, headers=admin_headers)).json()
    url = f"/api/admin/tasks/{task['id']}"

    for field in ("title", "status", "start_time", "end_time"):
        response = await client.put(url, json={field: None}, headers=admin_headers)
        assert response.status_code == 422, field

    cleared = await client.put(url, json={"description": None, "location": None}, headers=admin_headers)
    assert cleared.status_code == 200
    assert cleared.json()["title"] == "Valve check"
    assert cleared.json()["location"] is None


@pytest.mark.asyncio
async def test_list_filters_and_statistics(client, admin_headers):
    for title, location in (("Pump", "North Yard"), ("Valve", "North Yard"), ("Cable", "Depot")):
        await client.post("/api/admin/tasks", json={"title": title, "location": location}, headers=admin_headers)

    listed = await client.get("/api/admin/tasks", params={"location": "north"}, headers=admin_headers)
    assert listed.json()["total"] == 2

    searched = await client.get("/api/admin/tasks", params={"search": "cab"}, headers=admin_headers)
    assert [t["title"] for t in searched.json()["items"]] == ["Cable"]

    by_location = await client.get("/api/admin/tasks/by-location", headers=admin_headers)
    assert {row["location"]: row["count"] for row in by_location.json()} == {"Depot": 1, "North Yard": 2}

    stats = await client.get("/api/admin/tasks/statistics", headers=admin_headers)
    assert stats.json()["total_tasks"] == 3
    assert stats.json()["tasks_by_status"]["pending"] == 3


@pytest.mark.asyncio
async def test_assign_pins_task_to_pending(client, admin_headers, employee):
    task = (await client.post("/api/admin/tasks", json={"title": "Meter read"}, headers=admin_headers)).json()

    assigned = await client.post(
        f"/api/admin/tasks/{task['id']}/assign",
        json={"user_ids": [str(employee.id)], "date": "2026-10-19"},
        headers=admin_headers,
    )
    assert assigned.status_code == 201
    assert assigned.json()["ticket_number"] == "TT-000001"
    assert assigned.json()["assigned_users"][0]["email"] == "employee@example.com"

    detail = await client.get(f"/api/admin/tasks/{task['id']}", headers=admin_headers)
    body = detail.json()
    assert body["manual_override"] is True
    assert body["computed_status"] == "pending"
    assert body["assignment_stats"] == {"total": 1, "pending": 1, "active": 0, "completed": 0}


@pytest.mark.asyncio
async def test_assign_with_unknown_user_is_rejected(client, admin_headers, employee):
    task = (await client.post("/api/admin/tasks", json={"title": "Meter read"}, headers=admin_headers)).json()
    ghost = "00000000-0000-4000-8000-000000000001"

    response = await client.post(
        f"/api/admin/tasks/{task['id']}/assign",
        json={"user_ids": [str(employee.id), ghost]},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["detail"]["missing_user_ids"] == [ghost]

    # Nothing was changed
    detail = await client.get(f"/api/admin/tasks/{task['id']}", headers=admin_headers)
    assert detail.json()["manual_override"] is False
    assert detail.json()["assignment_stats"]["total"] == 0


@pytest.mark.asyncio
async def test_task_with_assignments_cannot_be_deleted(client, admin_headers, employee):
    task = (await client.post("/api/admin/tasks", json={"title": "Meter read"}, headers=admin_headers)).json()
    await client.post(
        f"/api/admin/tasks/{task['id']}/assign", json={"user_ids": [str(employee.id)]}, headers=admin_headers
    )

    response = await client.delete(f"/api/admin/tasks/{task['id']}", headers=admin_headers)
    assert response.status_code == 422

    spare = (await client.post("/api/admin/tasks", json={"title": "Spare"}, headers=admin_headers)).json()
    assert (await client.delete(f"/api/admin/tasks/{spare['id']}", headers=admin_headers)).status_code == 204
    assert (await client.get(f"/api/admin/tasks/{spare['id']}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_mark_completed_needs_completed_assignment(client, admin_headers, employee, employee_headers):
    task = (await client.post("/api/admin/tasks", json={"title": "Meter read"}, headers=admin_headers)).json()
    assignment = (
        await client.post(
            f"/api/admin/tasks/{task['id']}/assign", json={"user_ids": [str(employee.id)]}, headers=admin_headers
        )
    ).json()

    early = await client.post(f"/api/admin/tasks/{task['id']}/mark-completed", headers=admin_headers)
    assert early.status_code == 422

    await client.put(f"/api/my-tasks/{assignment['id']}/start", headers=employee_headers)
    await client.put(f"/api/my-tasks/{assignment['id']}/complete", headers=employee_headers)

    done = await client.post(f"/api/admin/tasks/{task['id']}/mark-completed", headers=admin_headers)
    assert done.status_code == 200
    assert done.json()["status"] == "completed"

    again = await client.post(f"/api/admin/tasks/{task['id']}/mark-completed", headers=admin_headers)
    assert again.status_code == 422


@pytest.mark.asyncio
async def test_tasks_with_completed_assignments_listed_first(client, admin_headers, employee, employee_headers):
    first = (await client.post("/api/admin/tasks", json={"title": "First"}, headers=admin_headers)).json()
    await client.post("/api/admin/tasks", json={"title": "Second"}, headers=admin_headers)

    assignment = (
        await client.post(
            f"/api/admin/tasks/{first['id']}/assign", json={"user_ids": [str(employee.id)]}, headers=admin_headers
        )
    ).json()
    await client.put(f"/api/my-tasks/{assignment['id']}/start", headers=employee_headers)
    await client.put(f"/api/my-tasks/{assignment['id']}/complete", headers=employee_headers)

    listed = await client.get("/api/admin/tasks", headers=admin_headers)
    assert listed.json()["items"][0]["title"] == "First"
