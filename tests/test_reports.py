"""Tests for work reports and their tickets."""
import uuid
from datetime import date

import pytest

from fieldops.schemas.task import TaskCreate
from fieldops.services import assignment_service, task_service


@pytest.fixture
def assignment_for(db_session):
    async def _make(*users, title="Substation inspection"):
        task = await task_service.create_task(db_session, TaskCreate(title=title))
        return await assignment_service.create_assignment(
            db_session,
            task_id=task.id,
            user_ids=[u.id for u in users],
            on_date=date(2026, 10, 19),
        )

    return _make


async def _file(client, headers, assignment_id, content="Breaker replaced", **extra):
    return await client.post(
        "/api/reports",
        json={"assignment_id": str(assignment_id), "content": content, **extra},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_employee_files_numbered_reports(client, employee, employee_headers, assignment_for):
    assignment = await assignment_for(employee)

    first = await _file(client, employee_headers, assignment.id, photos=["reports/a.jpg"])
    assert first.status_code == 201
    body = first.json()
    assert body["ticket_number"] == "RPT-000001"
    assert body["user"]["email"] == "employee@example.com"
    assert body["assignment_ticket_number"] == assignment.ticket_number
    assert body["task_title"] == "Substation inspection"
    assert body["photos"] == ["reports/a.jpg"]

    second = await _file(client, employee_headers, assignment.id, content="Follow-up")
    assert second.json()["ticket_number"] == "RPT-000002"


@pytest.mark.asyncio
async def test_report_requires_assignment_membership(
    client, employee, employee_headers, other_headers, admin_headers, assignment_for
):
    assignment = await assignment_for(employee)

    assert (await _file(client, other_headers, assignment.id)).status_code == 403
    assert (await _file(client, employee_headers, uuid.uuid4())).status_code == 404
    assert (await _file(client, employee_headers, assignment.id, content="")).status_code == 422
    # Admins do not hold "create reports"
    assert (await _file(client, admin_headers, assignment.id)).status_code == 403


@pytest.mark.asyncio
async def test_my_reports_and_statistics(
    client, employee, employee_headers, other_employee, other_headers, assignment_for
):
    assignment = await assignment_for(employee, other_employee)
    await _file(client, employee_headers, assignment.id)
    await _file(client, employee_headers, assignment.id, content="Second visit")
    await _file(client, other_headers, assignment.id)

    mine = await client.get("/api/reports/my", headers=employee_headers)
    body = mine.json()
    assert body["total"] == 2
    assert [r["content"] for r in body["items"]] == ["Second visit", "Breaker replaced"]

    future = await client.get("/api/reports/my", params={"start_date": "2999-01-01"}, headers=employee_headers)
    assert future.json()["total"] == 0

    stats = await client.get("/api/reports/statistics/my", headers=employee_headers)
    assert stats.json() == {"total_reports": 2, "reports_this_month": 2, "reports_this_week": 2}


@pytest.mark.asyncio
async def test_report_visibility(
    client, employee, employee_headers, other_employee, other_headers, admin_headers, assignment_for
):
    assignment = await assignment_for(employee)
    report_id = (await _file(client, employee_headers, assignment.id)).json()["id"]
    url = f"/api/reports/{report_id}"

    assert (await client.get(url, headers=employee_headers)).status_code == 200
    assert (await client.get(url, headers=other_headers)).status_code == 403
    assert (await client.get(url, headers=admin_headers)).status_code == 200
    assert (await client.get(f"/api/reports/{uuid.uuid4()}", headers=employee_headers)).status_code == 404

    shared = await assignment_for(employee, other_employee)
    shared_id = (await _file(client, employee_headers, shared.id)).json()["id"]
    assert (await client.get(f"/api/reports/{shared_id}", headers=other_headers)).status_code == 200


@pytest.mark.asyncio
async def test_report_update_rules(
    client, employee, employee_headers, other_employee, other_headers, admin_headers, assignment_for
):
    assignment = await assignment_for(employee, other_employee)
    report_id = (await _file(client, employee_headers, assignment.id)).json()["id"]
    url = f"/api/reports/{report_id}"

    own = await client.put(url, json={"content": "Breaker and fuse replaced"}, headers=employee_headers)
    assert own.status_code == 200
    assert own.json()["content"] == "Breaker and fuse replaced"
    assert own.json()["ticket_number"] == "RPT-000001"

    assert (await client.put(url, json={"content": "Mine now"}, headers=other_headers)).status_code == 403
    assert (await client.put(url, json={"content": None}, headers=employee_headers)).status_code == 422

    by_admin = await client.put(url, json={"photos": ["reports/b.jpg"]}, headers=admin_headers)
    assert by_admin.status_code == 200
    assert by_admin.json()["photos"] == ["reports/b.jpg"]
    assert by_admin.json()["content"] == "Breaker and fuse replaced"


@pytest.mark.asyncio
async def test_admin_report_management(
    client, employee, employee_headers, other_employee, other_headers, admin_headers, assignment_for
):
    pump = await assignment_for(employee, title="Pump overhaul")
    cable = await assignment_for(other_employee, title="Cable pull")
    await _file(client, employee_headers, pump.id, content="Seal leaking")
    await _file(client, other_headers, cable.id, content="Conduit blocked")

    listed = await client.get("/api/admin/reports", headers=admin_headers)
    assert listed.json()["total"] == 2

    by_user = await client.get(
        "/api/admin/reports", params={"user_id": str(other_employee.id)}, headers=admin_headers
    )
    assert [r["content"] for r in by_user.json()["items"]] == ["Conduit blocked"]

    by_search = await client.get("/api/admin/reports", params={"search": "seal"}, headers=admin_headers)
    assert [r["task_title"] for r in by_search.json()["items"]] == ["Pump overhaul"]

    for_task = await client.get(f"/api/admin/reports/tasks/{pump.task_id}", headers=admin_headers)
    assert [r["content"] for r in for_task.json()] == ["Seal leaking"]

    stats = await client.get("/api/admin/reports/statistics", headers=admin_headers)
    assert stats.json()["total_reports"] == 2
    only_one = await client.get(
        "/api/admin/reports/statistics", params={"user_id": str(employee.id)}, headers=admin_headers
    )
    assert only_one.json()["total_reports"] == 1

    report_id = by_user.json()["items"][0]["id"]
    assert (await client.delete(f"/api/admin/reports/{report_id}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/admin/reports/{report_id}", headers=admin_headers)).status_code == 404

    assert (await client.get("/api/admin/reports", headers=employee_headers)).status_code == 403


@pytest.mark.asyncio
async def test_report_tickets_are_listed(client, employee, employee_headers, assignment_for):
    assignment = await assignment_for(employee)
    report_id = (await _file(client, employee_headers, assignment.id)).json()["id"]

    listed = await client.get("/api/tickets", params={"type": "report"}, headers=employee_headers)
    assert [(e["type"], e["ticket_number"]) for e in listed.json()["items"]] == [("report", "RPT-000001")]

    found = await client.get("/api/tickets/number/rpt-000001", headers=employee_headers)
    assert found.json()["id"] == report_id
    assert found.json()["title"] == "Substation inspection"
    assert found.json()["status"] is None

    stats = await client.get("/api/tickets/statistics", headers=employee_headers)
    assert stats.json()["report_tickets"] == 1
    assert stats.json()["latest_report_ticket"] == "RPT-000001"
    assert stats.json()["total_tickets"] == 3
