"""Tests for location recording, history and geo queries."""
from datetime import date

import pytest

from fieldops.models.assignment import AssignmentStatus
from fieldops.models.task import Task
from fieldops.services import assignment_service
from fieldops.utils.geo import bounding_box, haversine_km, route_distance_km


def test_haversine_known_distance():
    # Paris to London, roughly 344 km
    assert haversine_km(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(343.5, abs=1.0)
    assert haversine_km(10.0, 10.0, 10.0, 10.0) == 0.0


def test_route_distance_sums_legs():
    points = [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)]
    assert route_distance_km(points) == pytest.approx(2 * haversine_km(0.0, 0.0, 0.0, 1.0))
    assert route_distance_km([(1.0, 1.0)]) == 0.0
    assert route_distance_km([]) == 0.0


def test_bounding_box_contains_radius():
    min_lat, max_lat, min_lon, max_lon = bounding_box(-6.2, 106.8, 1.0)
    assert min_lat < -6.2 < max_lat
    assert min_lon < 106.8 < max_lon
    assert haversine_km(-6.2, 106.8, max_lat, 106.8) >= 0.99


@pytest.fixture
def active_assignment(db_session, employee):
    async def _make(status=AssignmentStatus.ACTIVE, user_ids=None):
        task = Task(title="Survey")
        db_session.add(task)
        await db_session.commit()
        return await assignment_service.create_assignment(
            db_session,
            task_id=task.id,
            user_ids=user_ids or [employee.id],
            on_date=date(2026, 10, 19),
            status=status,
        )

    return _make


def _sample(assignment_id, lat, lng, **extra):
    return {"assignment_id": str(assignment_id), "latitude": lat, "longitude": lng, **extra}


@pytest.mark.asyncio
async def test_record_location_for_active_assignment(client, employee, employee_headers, active_assignment):
    assignment = await active_assignment()

    response = await client.post(
        "/api/locations",
        json=_sample(assignment.id, -6.2, 106.8, accuracy=5.0, tracking_status="manual"),
        headers=employee_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == str(employee.id)
    assert body["tracking_status"] == "manual"

    mine = await client.get("/api/locations/my", headers=employee_headers)
    assert mine.json()["total"] == 1


@pytest.mark.asyncio
async def test_pending_assignment_rejects_locations(client, employee_headers, active_assignment):
    assignment = await active_assignment(status=AssignmentStatus.PENDING)
    response = await client.post("/api/locations", json=_sample(assignment.id, 1.0, 1.0), headers=employee_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unassigned_user_cannot_record(client, other_headers, active_assignment):
    assignment = await active_assignment()
    response = await client.post("/api/locations", json=_sample(assignment.id, 1.0, 1.0), headers=other_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_out_of_range_coordinates_fail_validation(client, employee_headers, active_assignment):
    assignment = await active_assignment()
    response = await client.post("/api/locations", json=_sample(assignment.id, 91.0, 0.0), headers=employee_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_batch_keeps_good_items(client, employee_headers, active_assignment):
    active = await active_assignment()
    pending = await active_assignment(status=AssignmentStatus.PENDING)

    response = await client.post(
        "/api/locations/batch",
        json={
            "locations": [
                _sample(active.id, 1.0, 1.0),
                _sample(pending.id, 1.0, 1.0),
                _sample(active.id, 1.001, 1.0),
            ]
        },
        headers=employee_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["created_count"] == 2
    assert body["error_count"] == 1
    assert body["errors"][0]["index"] == 1


@pytest.mark.asyncio
async def test_batch_with_nothing_stored_is_422(client, employee_headers, active_assignment):
    pending = await active_assignment(status=AssignmentStatus.PENDING)
    response = await client.post(
        "/api/locations/batch",
        json={"locations": [_sample(pending.id, 1.0, 1.0)]},
        headers=employee_headers,
    )
    assert response.status_code == 422
    assert response.json()["created_count"] == 0


@pytest.mark.asyncio
async def test_batch_size_is_capped(client, employee_headers, active_assignment):
    active = await active_assignment()
    response = await client.post(
        "/api/locations/batch",
        json={"locations": [_sample(active.id, 1.0, 1.0)] * 101},
        headers=employee_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_route_orders_points_and_sums_distance(client, employee, employee_headers, active_assignment):
    assignment = await active_assignment()
    for i, stamp in enumerate(("2026-10-19T08:00:00Z", "2026-10-19T08:05:00Z", "2026-10-19T08:10:00Z")):
        await client.post(
            "/api/locations",
            json=_sample(assignment.id, 0.0, float(i) * 0.01, recorded_at=stamp),
            headers=employee_headers,
        )

    route = await client.get(f"/api/locations/tasks/{assignment.id}/route", headers=employee_headers)
    body = route.json()
    assert body["total_points"] == 3
    assert [p["longitude"] for p in body["points"]] == [0.0, 0.01, 0.02]
    assert body["total_distance_km"] == pytest.approx(2.22, abs=0.01)


@pytest.mark.asyncio
async def test_admin_route_is_per_user(
    client, employee, employee_headers, other_employee, other_headers, admin_headers, active_assignment
):
    assignment = await active_assignment(user_ids=[employee.id, other_employee.id])
    for minute in range(4):
        stamp = f"2026-10-19T08:0{minute}:00Z"
        await client.post(
            "/api/locations", json=_sample(assignment.id, 0.0, 0.0, recorded_at=stamp), headers=employee_headers
        )
        await client.post(
            "/api/locations", json=_sample(assignment.id, 0.0, 1.0, recorded_at=stamp), headers=other_headers
        )

    url = f"/api/admin/locations/tasks/{assignment.id}/route"
    missing_user = await client.get(url, headers=admin_headers)
    assert missing_user.status_code == 422

    route = await client.get(url, params={"user_id": str(other_employee.id)}, headers=admin_headers)
    body = route.json()
    assert body["user_id"] == str(other_employee.id)
    assert body["total_points"] == 4
    assert body["total_distance_km"] == 0.0


@pytest.mark.asyncio
async def test_admin_views(client, db_session, employee, employee_headers, other_employee, admin_headers, active_assignment):
    assignment = await active_assignment(user_ids=[employee.id, other_employee.id])
    await client.post("/api/locations", json=_sample(assignment.id, -6.2, 106.8), headers=employee_headers)
    await client.post("/api/locations", json=_sample(assignment.id, -6.21, 106.81), headers=employee_headers)

    history = await client.get(f"/api/admin/locations/tasks/{assignment.id}", headers=admin_headers)
    assert history.json()["total"] == 2

    current = await client.get(f"/api/admin/locations/tasks/{assignment.id}/current", headers=admin_headers)
    body = current.json()
    assert body["total_users"] == 2
    assert body["users_with_location"] == 1
    latest = next(e for e in body["locations"] if e["user"]["id"] == str(employee.id))
    assert latest["location"]["latitude"] == -6.21

    stats = await client.get(f"/api/admin/locations/tasks/{assignment.id}/statistics", headers=admin_headers)
    assert stats.json()["total_locations"] == 2
    assert stats.json()["auto_count"] == 2
    assert stats.json()["by_user"] == [{"user_id": str(employee.id), "count": 2}]

    user_stats = await client.get(f"/api/admin/locations/users/{employee.id}/statistics", headers=admin_headers)
    assert user_stats.json()["by_assignment"] == [{"assignment_id": str(assignment.id), "count": 2}]


@pytest.mark.asyncio
async def test_nearby_filters_by_radius(client, employee_headers, admin_headers, active_assignment):
    assignment = await active_assignment()
    await client.post("/api/locations", json=_sample(assignment.id, -6.2, 106.8), headers=employee_headers)
    await client.post("/api/locations", json=_sample(assignment.id, -6.2, 106.805), headers=employee_headers)
    await client.post("/api/locations", json=_sample(assignment.id, -6.5, 107.0), headers=employee_headers)

    response = await client.get(
        "/api/admin/locations/nearby",
        params={"latitude": -6.2, "longitude": 106.8, "radius": 1.0},
        headers=admin_headers,
    )
    body = response.json()
    assert len(body) == 2
    assert body[0]["distance_km"] == 0.0
    assert body[0]["distance_km"] <= body[1]["distance_km"]

    too_far = await client.get(
        "/api/admin/locations/nearby",
        params={"latitude": -6.2, "longitude": 106.8, "radius": 500},
        headers=admin_headers,
    )
    assert too_far.status_code == 422


@pytest.mark.asyncio
async def test_employee_cannot_read_other_assignment(client, other_headers, active_assignment):
    assignment = await active_assignment()
    response = await client.get(f"/api/locations/tasks/{assignment.id}", headers=other_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_deletes_location(client, employee_headers, admin_headers, active_assignment):
    assignment = await active_assignment()
    created = await client.post("/api/locations", json=_sample(assignment.id, 1.0, 1.0), headers=employee_headers)

    location_id = created.json()["id"]
    assert (await client.delete(f"/api/admin/locations/{location_id}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/admin/locations/{location_id}", headers=admin_headers)).status_code == 404
