"""Tests for the maintenance reports."""
from datetime import date

import pytest

from fieldops.models.assignment import AssignmentStatus
from fieldops.models.location import Location
from fieldops.models.task import Task
from fieldops.services import assignment_service, diagnostics_service


async def _assignment(db, user_ids):
    task = Task(title="Survey")
    db.add(task)
    await db.commit()
    return await assignment_service.create_assignment(
        db,
        task_id=task.id,
        user_ids=user_ids,
        on_date=date(2026, 10, 19),
        status=AssignmentStatus.ACTIVE,
    )


@pytest.mark.asyncio
async def test_assignment_report_flags_missing_users(db_session, employee, other_employee):
    await _assignment(db_session, [employee.id, other_employee.id])
    gone_id = other_employee.id
    await db_session.delete(other_employee)
    await db_session.commit()

    lines = await diagnostics_service.assignment_user_report(db_session)

    assert "Stored user ids: 2" in lines
    assert "Resolved users: 1" in lines
    assert f"  ! {gone_id}" in lines
    assert lines[-1] == "1 of 1 assignment(s) have missing or duplicated user ids"


@pytest.mark.asyncio
async def test_assignment_report_flags_duplicated_ids(db_session, employee, other_employee):
    assignment = await _assignment(db_session, [employee.id, other_employee.id])
    # Written around the service, which de-duplicates
    assignment.user_ids = [employee.id, other_employee.id, employee.id]
    await db_session.commit()

    lines = await diagnostics_service.assignment_user_report(db_session)

    assert "Stored user ids: 3" in lines
    assert "Distinct user ids: 2" in lines
    assert "Resolved users: 2" in lines
    assert f"  * {employee.id}" in lines
    assert lines[-1] == "1 of 1 assignment(s) have missing or duplicated user ids"


@pytest.mark.asyncio
async def test_assignment_report_without_assignments(db_session):
    lines = await diagnostics_service.assignment_user_report(db_session)
    assert lines[-1] == "No assignments found"


@pytest.mark.asyncio
async def test_roles_report_lists_seeded_roles(db_session):
    lines = await diagnostics_service.roles_report(db_session)
    assert "Found 3 role(s):" in lines
    assert "  - Name: employee" in lines


@pytest.mark.asyncio
async def test_locations_report_shows_latest_sample(db_session, employee):
    assignment = await _assignment(db_session, [employee.id])
    db_session.add(Location(assignment_id=assignment.id, user_id=employee.id, latitude=1.5, longitude=2.5))
    await db_session.commit()

    lines = await diagnostics_service.locations_report(db_session)

    assert "Total location records: 1" in lines
    assert "  Lat: 1.5" in lines
    assert "  Accuracy: -" in lines
