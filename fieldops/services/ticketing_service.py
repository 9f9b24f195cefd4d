"""Cross-entity ticket lookup."""
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import NotFoundError, ValidationError
from fieldops.models.assignment import Assignment
from fieldops.models.report import Report
from fieldops.models.task import Task
from fieldops.schemas.ticket import TicketEntry, TicketStatistics
from fieldops.services.ticket_service import newest_ticket_first

MIN_SEARCH_LENGTH = 2


def _task_entry(task: Task) -> TicketEntry:
    return TicketEntry(
        ticket_number=task.ticket_number,
        type="task",
        id=task.id,
        title=task.title,
        status=task.status.value,
        created_at=task.created_at,
    )


def _assignment_entry(assignment: Assignment) -> TicketEntry:
    return TicketEntry(
        ticket_number=assignment.ticket_number,
        type="assignment",
        id=assignment.id,
        title=assignment.task.title if assignment.task else None,
        status=assignment.status.value,
        created_at=assignment.created_at,
    )


def _report_entry(report: Report, task_title: Optional[str]) -> TicketEntry:
    return TicketEntry(
        ticket_number=report.ticket_number,
        type="report",
        id=report.id,
        title=task_title,
        created_at=report.created_at,
    )


def _reports_with_titles():
    return (
        select(Report, Task.title)
        .join(Assignment, Report.assignment_id == Assignment.id)
        .join(Task, Assignment.task_id == Task.id)
    )


async def list_tickets(
    db: AsyncSession,
    *,
    ticket_type: Optional[str] = None,
    search: Optional[str] = None,
) -> List[TicketEntry]:
    """Ticketed tasks, assignments and reports, newest ticket first within each kind."""
    entries: List[TicketEntry] = []
    if ticket_type in (None, "task"):
        query = select(Task).where(Task.ticket_number.isnot(None))
        if search:
            query = query.where(Task.ticket_number.ilike(f"%{search}%"))
        result = await db.execute(query.order_by(*newest_ticket_first(Task.ticket_number)))
        entries.extend(_task_entry(t) for t in result.scalars().all())
    if ticket_type in (None, "assignment"):
        query = select(Assignment).where(Assignment.ticket_number.isnot(None))
        if search:
            query = query.where(Assignment.ticket_number.ilike(f"%{search}%"))
        result = await db.execute(query.order_by(*newest_ticket_first(Assignment.ticket_number)))
        entries.extend(_assignment_entry(a) for a in result.scalars().all())
    if ticket_type in (None, "report"):
        query = _reports_with_titles().where(Report.ticket_number.isnot(None))
        if search:
            query = query.where(Report.ticket_number.ilike(f"%{search}%"))
        result = await db.execute(query.order_by(*newest_ticket_first(Report.ticket_number)))
        entries.extend(_report_entry(report, title) for report, title in result.all())
    return entries


async def get_by_number(db: AsyncSession, ticket_number: str) -> TicketEntry:
    ticket_number = ticket_number.strip().upper()
    result = await db.execute(select(Task).where(Task.ticket_number == ticket_number))
    task = result.scalar_one_or_none()
    if task is not None:
        return _task_entry(task)
    result = await db.execute(select(Assignment).where(Assignment.ticket_number == ticket_number))
    assignment = result.scalar_one_or_none()
    if assignment is not None:
        return _assignment_entry(assignment)
    result = await db.execute(_reports_with_titles().where(Report.ticket_number == ticket_number))
    row = result.one_or_none()
    if row is not None:
        return _report_entry(*row)
    raise NotFoundError("Ticket not found")


async def search_tickets(db: AsyncSession, query: str) -> List[TicketEntry]:
    query = (query or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        raise ValidationError(f"Search query must be at least {MIN_SEARCH_LENGTH} characters")
    return await list_tickets(db, search=query)


async def _count_ticketed(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count(model.id)).where(model.ticket_number.isnot(None)))
    return result.scalar_one()


async def _latest_ticket(db: AsyncSession, model) -> Optional[str]:
    result = await db.execute(
        select(model.ticket_number)
        .where(model.ticket_number.isnot(None))
        .order_by(*newest_ticket_first(model.ticket_number))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def statistics(db: AsyncSession) -> TicketStatistics:
    task_count = await _count_ticketed(db, Task)
    assignment_count = await _count_ticketed(db, Assignment)
    report_count = await _count_ticketed(db, Report)
    return TicketStatistics(
        total_tickets=task_count + assignment_count + report_count,
        task_tickets=task_count,
        assignment_tickets=assignment_count,
        report_tickets=report_count,
        latest_task_ticket=await _latest_ticket(db, Task),
        latest_assignment_ticket=await _latest_ticket(db, Assignment),
        latest_report_ticket=await _latest_ticket(db, Report),
    )
