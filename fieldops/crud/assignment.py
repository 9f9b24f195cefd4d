"""Assignment CRUD operations."""
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import String, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.base import CRUDBase
from fieldops.models.assignment import Assignment, AssignmentStatus


def contains_user(user_id: UUID):
    """Filter clause matching assignments whose ``user_ids`` include ``user_id``.

    Ids are serialized as quoted canonical strings, so a text match on the
    JSON array works on PostgreSQL and SQLite alike.
    """
    return cast(Assignment.user_ids, String).like(f'%"{user_id}"%')


class CRUDAssignment(CRUDBase[Assignment, dict, dict]):
    """CRUD operations for Assignment."""

    def _filtered(
        self,
        *,
        user_id: Optional[UUID] = None,
        task_id: Optional[UUID] = None,
        status: Optional[AssignmentStatus] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        query = select(Assignment)
        if user_id:
            query = query.where(contains_user(user_id))
        if task_id:
            query = query.where(Assignment.task_id == task_id)
        if status:
            query = query.where(Assignment.status == status)
        if on_date:
            query = query.where(Assignment.date == on_date)
        if start_date and end_date:
            query = query.where(Assignment.date.between(start_date, end_date))
        return query

    async def search(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        order_by_date: bool = False,
        **filters,
    ) -> Tuple[List[Assignment], int]:
        """Filtered page of assignments and the total matching count."""
        query = self._filtered(**filters)
        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
        order = Assignment.date.desc() if order_by_date else Assignment.created_at.desc()
        result = await db.execute(query.order_by(order).offset(skip).limit(limit))
        return list(result.scalars().all()), total

    async def get_all(self, db: AsyncSession) -> List[Assignment]:
        result = await db.execute(select(Assignment).order_by(Assignment.created_at))
        return list(result.scalars().all())

    async def count_for_task(self, db: AsyncSession, *, task_id: UUID) -> Dict[str, int]:
        result = await db.execute(
            select(Assignment.status, func.count(Assignment.id))
            .where(Assignment.task_id == task_id)
            .group_by(Assignment.status)
        )
        return {status.value: count for status, count in result.all()}

    async def count_for_user(self, db: AsyncSession, *, user_id: UUID) -> Dict[str, int]:
        result = await db.execute(
            select(Assignment.status, func.count(Assignment.id))
            .where(contains_user(user_id))
            .group_by(Assignment.status)
        )
        return {status.value: count for status, count in result.all()}

    async def count_by_status(self, db: AsyncSession) -> Dict[str, int]:
        result = await db.execute(
            select(Assignment.status, func.count(Assignment.id)).group_by(Assignment.status)
        )
        return {status.value: count for status, count in result.all()}


assignment = CRUDAssignment(Assignment)
