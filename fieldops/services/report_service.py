"""Work reports filed against assignments."""
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import settings
from fieldops.core.exceptions import ForbiddenError, NotFoundError
from fieldops.core.security import ADMIN_ROLES
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.report import report as report_crud
from fieldops.models.report import Report
from fieldops.models.user import User
from fieldops.schemas.common import PaginatedResponse
from fieldops.schemas.report import ReportCreate, ReportResponse, ReportStatistics, ReportUpdate
from fieldops.schemas.user import UserSummary
from fieldops.services.ticket_service import create_with_ticket
from fieldops.utils.permissions import has_any_role
from fieldops.utils.time import utcnow

logger = logging.getLogger(__name__)


def to_response(row: Row) -> ReportResponse:
    report, user, assignment, task = row
    return ReportResponse(
        id=report.id,
        ticket_number=report.ticket_number,
        user_id=report.user_id,
        user=UserSummary.model_validate(user),
        assignment_id=report.assignment_id,
        assignment_ticket_number=assignment.ticket_number,
        task_id=task.id,
        task_title=task.title,
        content=report.content,
        photos=list(report.photos or []),
        created_at=report.created_at,
        updated_at=report.updated_at,
    )


async def get_detailed(db: AsyncSession, report_id: UUID) -> Row:
    row = await report_crud.get_detailed(db, id=report_id)
    if row is None:
        raise NotFoundError("Report not found")
    return row


async def page(db: AsyncSession, *, skip: int, limit: int, **filters) -> PaginatedResponse[ReportResponse]:
    rows, total = await report_crud.search(db, skip=skip, limit=limit, **filters)
    return PaginatedResponse[ReportResponse](
        total=total,
        skip=skip,
        limit=limit,
        items=[to_response(row) for row in rows],
    )


def can_view(row: Row, user: User) -> bool:
    """Authors, users on the same assignment and admins may read a report."""
    report, _, assignment, _ = row
    return report.user_id == user.id or assignment.has_user(user.id) or has_any_role(user, ADMIN_ROLES)


def can_edit(report: Report, user: User) -> bool:
    return report.user_id == user.id or has_any_role(user, ADMIN_ROLES)


async def create_report(db: AsyncSession, data: ReportCreate, user: User) -> Row:
    """File a report with the next ``RPT`` ticket number.

    Only users assigned to the assignment may report on it.
    """
    assignment = await assignment_crud.get(db, id=data.assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment not found")
    if not assignment.has_user(user.id):
        raise ForbiddenError("You are not assigned to this task")

    # A ticket retry rolls back and expires loaded objects
    user_id, assignment_id = user.id, assignment.id
    report = await create_with_ticket(
        db,
        Report,
        settings.REPORT_TICKET_PREFIX,
        lambda ticket_number: Report(
            ticket_number=ticket_number,
            user_id=user_id,
            assignment_id=assignment_id,
            content=data.content,
            photos=list(data.photos),
        ),
    )
    logger.info("User %s filed report %s", user_id, report.ticket_number)
    return await get_detailed(db, report.id)


async def update_report(db: AsyncSession, report: Report, data: ReportUpdate) -> Row:
    values = data.model_dump(exclude_unset=True)
    report = await report_crud.update(db, db_obj=report, obj_in=values)
    return await get_detailed(db, report.id)


async def statistics(db: AsyncSession, user_id: Optional[UUID] = None) -> ReportStatistics:
    """Report totals overall, this calendar month and this week (from Monday), in UTC."""
    now = utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month_start = today.replace(day=1)
    week_start = today - timedelta(days=today.weekday())
    return ReportStatistics(
        total_reports=await report_crud.count_since(db, user_id=user_id),
        reports_this_month=await report_crud.count_since(db, user_id=user_id, since=month_start),
        reports_this_week=await report_crud.count_since(db, user_id=user_id, since=week_start),
    )
