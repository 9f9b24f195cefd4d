"""Location CRUD operations."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.base import CRUDBase
from fieldops.models.location import Location, TrackingStatus


class CRUDLocation(CRUDBase[Location, dict, dict]):
    """CRUD operations for Location."""

    async def history(
        self,
        db: AsyncSession,
        *,
        assignment_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        tracking_status: Optional[TrackingStatus] = None,
        oldest_first: bool = False,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Location]:
        """Samples filtered by assignment and/or user, newest first by default."""
        query = select(Location)
        if assignment_id:
            query = query.where(Location.assignment_id == assignment_id)
        if user_id:
            query = query.where(Location.user_id == user_id)
        if tracking_status:
            query = query.where(Location.tracking_status == tracking_status)
        if oldest_first:
            query = query.order_by(Location.recorded_at.asc(), Location.created_at.asc())
        else:
            query = query.order_by(Location.recorded_at.desc(), Location.created_at.desc())
        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count(
        self,
        db: AsyncSession,
        *,
        assignment_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        tracking_status: Optional[TrackingStatus] = None,
    ) -> int:
        query = select(func.count(Location.id))
        if assignment_id:
            query = query.where(Location.assignment_id == assignment_id)
        if user_id:
            query = query.where(Location.user_id == user_id)
        if tracking_status:
            query = query.where(Location.tracking_status == tracking_status)
        return (await db.execute(query)).scalar_one()

    async def latest_for_user(
        self,
        db: AsyncSession,
        *,
        assignment_id: UUID,
        user_id: UUID,
    ) -> Optional[Location]:
        rows = await self.history(db, assignment_id=assignment_id, user_id=user_id, limit=1)
        return rows[0] if rows else None

    async def in_box(
        self,
        db: AsyncSession,
        *,
        min_lat: float,
        max_lat: float,
        min_lon: float,
        max_lon: float,
        assignment_id: Optional[UUID] = None,
    ) -> List[Location]:
        query = select(Location).where(
            Location.latitude.between(min_lat, max_lat),
            Location.longitude.between(min_lon, max_lon),
        )
        if assignment_id:
            query = query.where(Location.assignment_id == assignment_id)
        result = await db.execute(query)
        return list(result.scalars().all())


location = CRUDLocation(Location)
