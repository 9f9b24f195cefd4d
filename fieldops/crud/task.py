"""Task CRUD operations."""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.base import CRUDBase
from fieldops.models.assignment import Assignment, AssignmentStatus
from fieldops.models.task import Task, TaskStatus


class CRUDTask(CRUDBase[Task, dict, dict]):
    """CRUD operations for Task."""

    async def search(
        self,
        db: AsyncSession,
        *,
        status: Optional[TaskStatus] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[Task], int]:
        """Filtered page of tasks; tasks with completed assignments first."""
        query = select(Task)
        if status:
            query = query.where(Task.status == status)
        if location:
            query = query.where(Task.location.ilike(f"%{location}%"))
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))

        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()

        completed = (
            select(func.count(Assignment.id))
            .where(
                Assignment.task_id == Task.id,
                Assignment.status == AssignmentStatus.COMPLETED,
            )
            .correlate(Task)
            .scalar_subquery()
        )
        result = await db.execute(
            query.order_by(completed.desc(), Task.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    async def count_by_status(self, db: AsyncSession) -> Dict[str, int]:
        result = await db.execute(select(Task.status, func.count(Task.id)).group_by(Task.status))
        return {status.value: count for status, count in result.all()}

    async def count_by_location(self, db: AsyncSession) -> List[Tuple[Optional[str], int]]:
        result = await db.execute(
            select(Task.location, func.count(Task.id)).group_by(Task.location).order_by(Task.location)
        )
        return [(location, count) for location, count in result.all()]


task = CRUDTask(Task)
