"""Assignment workflows and assigned-user resolution."""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import settings
from fieldops.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from fieldops.core.security import ADMIN_ROLES
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.task import task as task_crud
from fieldops.crud.user import user as user_crud
from fieldops.models.assignment import Assignment, AssignmentStatus
from fieldops.models.user import User
from fieldops.schemas.assignment import (
    AssignmentResponse,
    AssignmentStatistics,
    AssignmentUpdate,
    TaskBrief,
)
from fieldops.schemas.user import UserSummary
from fieldops.services.task_service import is_within_work_hours
from fieldops.services.ticket_service import create_with_ticket
from fieldops.utils.permissions import has_any_role
from fieldops.utils.time import minutes_between, utcnow

logger = logging.getLogger(__name__)

INACTIVE = "inactive"


@dataclass
class ResolvedUsers:
    """Users behind an assignment's stored ids.

    ``users`` follows the stored order; ``missing_ids`` holds ids that no
    longer match a user.
    """

    users: List[User] = field(default_factory=list)
    missing_ids: List[UUID] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_ids


def _dedupe(user_ids: Iterable) -> List[UUID]:
    seen = set()
    ordered = []
    for uid in user_ids:
        uid = uid if isinstance(uid, UUID) else UUID(str(uid))
        if uid not in seen:
            seen.add(uid)
            ordered.append(uid)
    return ordered


def _resolve_from_map(user_ids: Iterable, by_id: Dict[UUID, User]) -> ResolvedUsers:
    resolved = ResolvedUsers()
    for uid in _dedupe(user_ids or []):
        user = by_id.get(uid)
        if user is None:
            resolved.missing_ids.append(uid)
        else:
            resolved.users.append(user)
    return resolved


async def _load_users(db: AsyncSession, user_ids: Iterable) -> Dict[UUID, User]:
    users = await user_crud.get_by_ids(db, ids=_dedupe(user_ids))
    return {u.id: u for u in users}


async def resolve_assigned_users(db: AsyncSession, user_ids: Iterable) -> ResolvedUsers:
    """Resolve stored user ids with one bulk lookup."""
    user_ids = list(user_ids or [])
    resolved = _resolve_from_map(user_ids, await _load_users(db, user_ids))
    if resolved.missing_ids:
        logger.warning(
            "Unresolved assignment user ids: %s",
            ", ".join(str(uid) for uid in resolved.missing_ids),
        )
    return resolved


async def ensure_users_exist(db: AsyncSession, user_ids: Iterable) -> List[User]:
    """Return the users for ``user_ids`` or fail listing the unknown ones."""
    resolved = _resolve_from_map(user_ids, await _load_users(db, user_ids))
    if resolved.missing_ids:
        raise ValidationError(
            {
                "message": "Unknown user ids",
                "missing_user_ids": [str(uid) for uid in resolved.missing_ids],
            }
        )
    return resolved.users


def compute_assignment_status(assignment: Assignment, now: Optional[time] = None) -> str:
    """Effective status; a pending assignment outside its task's hours reads as inactive."""
    if assignment.status != AssignmentStatus.PENDING:
        return assignment.status.value
    if assignment.task is None or not is_within_work_hours(
        assignment.task.start_time, assignment.task.end_time, now
    ):
        return INACTIVE
    return AssignmentStatus.PENDING.value


def _build_response(assignment: Assignment, resolved: ResolvedUsers, now: Optional[time] = None) -> AssignmentResponse:
    task = assignment.task
    return AssignmentResponse(
        id=assignment.id,
        ticket_number=assignment.ticket_number,
        task_id=assignment.task_id,
        task=TaskBrief.model_validate(task) if task is not None else None,
        user_ids=list(assignment.user_ids or []),
        assigned_users=[UserSummary.model_validate(u) for u in resolved.users],
        missing_user_ids=resolved.missing_ids,
        status=assignment.status,
        computed_status=compute_assignment_status(assignment, now),
        is_within_work_hours=task is not None and is_within_work_hours(task.start_time, task.end_time, now),
        date=assignment.date,
        start_time=assignment.start_time,
        end_time=assignment.end_time,
        duration_minutes=minutes_between(assignment.start_time, assignment.end_time),
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
    )


async def to_responses(db: AsyncSession, assignments: List[Assignment]) -> List[AssignmentResponse]:
    """Serialize a page of assignments with a single user lookup."""
    all_ids = [uid for a in assignments for uid in (a.user_ids or [])]
    by_id = await _load_users(db, all_ids)
    responses = []
    for assignment in assignments:
        resolved = _resolve_from_map(assignment.user_ids, by_id)
        if resolved.missing_ids:
            logger.warning(
                "Assignment %s references missing users: %s",
                assignment.ticket_number or assignment.id,
                ", ".join(str(uid) for uid in resolved.missing_ids),
            )
        responses.append(_build_response(assignment, resolved))
    return responses


async def to_response(db: AsyncSession, assignment: Assignment) -> AssignmentResponse:
    return _build_response(assignment, await resolve_assigned_users(db, assignment.user_ids))


async def create_assignment(
    db: AsyncSession,
    *,
    task_id: UUID,
    user_ids: Iterable,
    on_date: date,
    start_time: Optional[datetime] = None,
    status: AssignmentStatus = AssignmentStatus.PENDING,
) -> Assignment:
    """Create an assignment with the next ``TT`` ticket number."""
    if await task_crud.get(db, id=task_id) is None:
        raise NotFoundError("Task not found")
    user_ids = _dedupe(user_ids)
    await ensure_users_exist(db, user_ids)

    assignment = await create_with_ticket(
        db,
        Assignment,
        settings.ASSIGNMENT_TICKET_PREFIX,
        lambda ticket_number: Assignment(
            ticket_number=ticket_number,
            task_id=task_id,
            user_ids=user_ids,
            date=on_date,
            start_time=start_time,
            status=status,
        ),
    )
    logger.info("Created assignment %s for %d user(s)", assignment.ticket_number, len(user_ids))
    return assignment


async def update_assignment(db: AsyncSession, assignment: Assignment, data: AssignmentUpdate) -> Assignment:
    values = data.model_dump(exclude_unset=True)
    if values.get("user_ids") is not None:
        values["user_ids"] = _dedupe(values["user_ids"])
        await ensure_users_exist(db, values["user_ids"])
    return await assignment_crud.update(db, db_obj=assignment, obj_in=values)


def can_act_on(assignment: Assignment, user: User) -> bool:
    """Assigned users and admins may drive an assignment."""
    return assignment.has_user(user.id) or has_any_role(user, ADMIN_ROLES)


async def start_assignment(db: AsyncSession, assignment: Assignment, user: User) -> Assignment:
    """pending -> active."""
    if not can_act_on(assignment, user):
        raise ForbiddenError("Unauthorized to start this task")
    if assignment.status != AssignmentStatus.PENDING:
        raise ValidationError("Task can only be started from pending status")
    return await assignment_crud.update(
        db,
        db_obj=assignment,
        obj_in={"status": AssignmentStatus.ACTIVE, "start_time": utcnow()},
    )


async def complete_assignment(db: AsyncSession, assignment: Assignment, user: User) -> Assignment:
    """active -> completed."""
    if not can_act_on(assignment, user):
        raise ForbiddenError("Unauthorized to complete this task")
    if assignment.status != AssignmentStatus.ACTIVE:
        raise ValidationError("Task must be active to complete")
    return await assignment_crud.update(
        db,
        db_obj=assignment,
        obj_in={"status": AssignmentStatus.COMPLETED, "end_time": utcnow()},
    )


async def cancel_assignment(db: AsyncSession, assignment: Assignment) -> Assignment:
    """Reset to pending."""
    return await assignment_crud.update(db, db_obj=assignment, obj_in={"status": AssignmentStatus.PENDING})


async def delete_assignment(db: AsyncSession, assignment: Assignment) -> None:
    if assignment.status == AssignmentStatus.COMPLETED:
        raise ValidationError("Cannot delete completed task assignment")
    await assignment_crud.remove(db, id=assignment.id)


async def user_statistics(db: AsyncSession, user_id: UUID) -> AssignmentStatistics:
    counts = await assignment_crud.count_for_user(db, user_id=user_id)
    return AssignmentStatistics(
        user_id=user_id,
        total_assignments=sum(counts.values()),
        pending=counts.get(AssignmentStatus.PENDING.value, 0),
        active=counts.get(AssignmentStatus.ACTIVE.value, 0),
        completed=counts.get(AssignmentStatus.COMPLETED.value, 0),
    )
