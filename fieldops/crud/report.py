"""Report CRUD operations."""
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.base import CRUDBase
from fieldops.models.assignment import Assignment
from fieldops.models.report import Report
from fieldops.models.task import Task
from fieldops.models.user import User
from fieldops.services.ticket_service import newest_ticket_first


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class CRUDReport(CRUDBase[Report, dict, dict]):
    """CRUD operations for Report."""

    def _detailed(self):
        """Reports joined with their author, assignment and task.

        Rows unpack as ``(report, user, assignment, task)``.
        """
        return (
            select(Report, User, Assignment, Task)
            .join(User, Report.user_id == User.id)
            .join(Assignment, Report.assignment_id == Assignment.id)
            .join(Task, Assignment.task_id == Task.id)
        )

    def _filtered(
        self,
        query,
        *,
        user_id: Optional[UUID] = None,
        assignment_id: Optional[UUID] = None,
        task_id: Optional[UUID] = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        if user_id:
            query = query.where(Report.user_id == user_id)
        if assignment_id:
            query = query.where(Report.assignment_id == assignment_id)
        if task_id:
            query = query.where(Assignment.task_id == task_id)
        if search:
            query = query.where(Report.content.ilike(f"%{search}%"))
        if start_date:
            query = query.where(Report.created_at >= _day_start(start_date))
        if end_date:
            query = query.where(Report.created_at < _day_start(end_date + timedelta(days=1)))
        return query

    async def get_detailed(self, db: AsyncSession, *, id: UUID) -> Optional[Row]:
        result = await db.execute(self._detailed().where(Report.id == id))
        return result.one_or_none()

    async def search(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: Optional[int] = 100,
        **filters,
    ) -> Tuple[List[Row], int]:
        """Filtered page of detailed rows, newest first, and the total count."""
        query = self._filtered(self._detailed(), **filters)
        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
        query = query.order_by(
            Report.created_at.desc(), *newest_ticket_first(Report.ticket_number)
        ).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.all()), total

    async def count_since(
        self,
        db: AsyncSession,
        *,
        since: Optional[datetime] = None,
        user_id: Optional[UUID] = None,
    ) -> int:
        query = select(func.count(Report.id))
        if user_id:
            query = query.where(Report.user_id == user_id)
        if since:
            query = query.where(Report.created_at >= since)
        return (await db.execute(query)).scalar_one()


report = CRUDReport(Report)
