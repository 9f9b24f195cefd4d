"""Plain-text consistency reports used by the maintenance scripts."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.location import location as location_crud
from fieldops.crud.user import role as role_crud, user as user_crud
from fieldops.models.assignment import Assignment
from fieldops.services.assignment_service import resolve_assigned_users


def _heading(title: str) -> List[str]:
    return [title, "=" * len(title), ""]


async def assignment_user_report(db: AsyncSession) -> List[str]:
    """Stored user ids against resolved users for every assignment.

    An assignment counts as inconsistent when an id no longer matches a user
    or the same id is stored more than once.
    """
    lines = _heading("Assignment user counts")
    assignments = await assignment_crud.get_all(db)
    if not assignments:
        return lines + ["No assignments found"]

    mismatched = 0
    for assignment in assignments:
        stored_ids = list(assignment.user_ids or [])
        resolved = await resolve_assigned_users(db, stored_ids)
        duplicates = sorted({uid for uid in stored_ids if stored_ids.count(uid) > 1}, key=str)
        lines.append(f"Assignment: {assignment.ticket_number or assignment.id}")
        lines.append(f"Task: {assignment.task.title if assignment.task else '<missing task>'}")
        lines.append(f"Stored user ids: {len(stored_ids)}")
        lines.append(f"Distinct user ids: {len(set(stored_ids))}")
        lines.append(f"Resolved users: {len(resolved.users)}")
        for user in resolved.users:
            lines.append(f"  - {user.name}")
        if not resolved.is_complete:
            lines.append("Unresolved ids:")
            lines.extend(f"  ! {uid}" for uid in resolved.missing_ids)
        if duplicates:
            lines.append("Duplicated ids:")
            lines.extend(f"  * {uid}" for uid in duplicates)
        if duplicates or not resolved.is_complete:
            mismatched += 1
        lines.append("")

    lines.append(f"{mismatched} of {len(assignments)} assignment(s) have missing or duplicated user ids")
    return lines


async def roles_report(db: AsyncSession) -> List[str]:
    """Every role with its permissions."""
    lines = _heading("Roles")
    roles = await role_crud.get_all(db)
    if not roles:
        return lines + ["No roles found. Run scripts/init_admin.py to seed them."]

    lines.append(f"Found {len(roles)} role(s):")
    lines.append("")
    for role in roles:
        lines.append(f"  - Name: {role.name}")
        lines.append(f"    ID: {role.id}")
        names = sorted(p.name for p in role.permissions)
        lines.append(f"    Permissions ({len(names)}): {', '.join(names) if names else '-'}")
        lines.append("")
    return lines


async def locations_report(db: AsyncSession, assignment_id: Optional[UUID] = None) -> List[str]:
    """Latest sample per user for one assignment (the oldest one by default)."""
    lines = _heading("Assignment locations")
    if assignment_id is None:
        result = await db.execute(select(Assignment).order_by(Assignment.created_at).limit(1))
        assignment = result.scalar_one_or_none()
    else:
        assignment = await assignment_crud.get(db, id=assignment_id)
    if assignment is None:
        return lines + ["No assignments found"]

    lines.append(f"Assignment: {assignment.ticket_number or assignment.id}")
    lines.append(f"Task: {assignment.task.title if assignment.task else '<missing task>'}")
    lines.append(f"Status: {assignment.status.value}")
    lines.append(f"User ids: {', '.join(str(uid) for uid in assignment.user_ids or [])}")
    lines.append("")

    rows = await location_crud.history(db, assignment_id=assignment.id)
    lines.append(f"Total location records: {len(rows)}")
    if not rows:
        return lines + ["No location data found"]

    # Rows are newest first, so the first row seen per user is the latest
    latest = {}
    counts = {}
    for row in rows:
        latest.setdefault(row.user_id, row)
        counts[row.user_id] = counts.get(row.user_id, 0) + 1

    for user_id, row in latest.items():
        user = await user_crud.get(db, id=user_id)
        lines.append("")
        lines.append(f"User: {user.name if user else '<deleted user>'} ({user_id})")
        lines.append(f"Total locations: {counts[user_id]}")
        lines.append("Latest location:")
        lines.append(f"  Lat: {row.latitude}")
        lines.append(f"  Lng: {row.longitude}")
        accuracy = f"{row.accuracy} meters" if row.accuracy is not None else "-"
        lines.append(f"  Accuracy: {accuracy}")
        lines.append(f"  Address: {row.address or '-'}")
        lines.append(f"  Recorded: {row.recorded_at.isoformat()}")
    return lines
