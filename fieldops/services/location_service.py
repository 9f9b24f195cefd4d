"""Location recording and history queries."""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.location import location as location_crud
from fieldops.models.assignment import Assignment, AssignmentStatus
from fieldops.models.location import Location, TrackingStatus
from fieldops.models.user import User
from fieldops.schemas.location import (
    AssignmentLocationStatistics,
    BatchItemError,
    CountByAssignment,
    CountByUser,
    CurrentLocationsResponse,
    LocationBatchResult,
    LocationCreate,
    LocationResponse,
    NearbyLocation,
    RouteResponse,
    UserCurrentLocation,
    UserLocationStatistics,
)
from fieldops.schemas.user import UserSummary
from fieldops.services.assignment_service import resolve_assigned_users
from fieldops.utils.geo import bounding_box, haversine_km, route_distance_km
from fieldops.utils.time import as_naive_utc, utcnow

logger = logging.getLogger(__name__)

MIN_RADIUS_KM = 0.1
MAX_RADIUS_KM = 50.0


async def _recordable_assignment(db: AsyncSession, assignment_id: UUID, user: User) -> Assignment:
    assignment = await assignment_crud.get(db, id=assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment not found")
    if not assignment.has_user(user.id):
        raise ForbiddenError("You are not assigned to this task")
    if assignment.status != AssignmentStatus.ACTIVE:
        raise ValidationError("Locations can only be recorded for active assignments")
    return assignment


def _new_location(data: LocationCreate, user: User) -> Location:
    return Location(
        assignment_id=data.assignment_id,
        user_id=user.id,
        latitude=data.latitude,
        longitude=data.longitude,
        accuracy=data.accuracy,
        address=data.address,
        tracking_status=data.tracking_status,
        recorded_at=data.recorded_at or utcnow(),
    )


async def record_location(db: AsyncSession, data: LocationCreate, user: User) -> Location:
    """Record one sample for an active assignment the caller is on."""
    await _recordable_assignment(db, data.assignment_id, user)
    obj = _new_location(data, user)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def record_batch(db: AsyncSession, items: List[LocationCreate], user: User) -> LocationBatchResult:
    """Record many samples; a rejected item does not stop the others."""
    created: List[Location] = []
    errors: List[BatchItemError] = []
    for index, item in enumerate(items):
        try:
            await _recordable_assignment(db, item.assignment_id, user)
        except (NotFoundError, ForbiddenError, ValidationError) as exc:
            errors.append(BatchItemError(index=index, detail=str(exc.detail)))
            continue
        obj = _new_location(item, user)
        db.add(obj)
        created.append(obj)

    if created:
        await db.commit()
        for obj in created:
            await db.refresh(obj)
    if errors:
        logger.info("Rejected %d of %d batch location(s) from user %s", len(errors), len(items), user.id)

    return LocationBatchResult(
        created_count=len(created),
        error_count=len(errors),
        locations=[LocationResponse.model_validate(obj) for obj in created],
        errors=errors,
    )


async def route(db: AsyncSession, assignment_id: UUID, user_id: UUID) -> RouteResponse:
    """One user's samples oldest first with the travelled distance in km.

    Routes are always per user; samples of different users never form one line.
    """
    points = await location_crud.history(db, assignment_id=assignment_id, user_id=user_id, oldest_first=True)
    distance = route_distance_km((p.latitude, p.longitude) for p in points)
    return RouteResponse(
        assignment_id=assignment_id,
        user_id=user_id,
        total_points=len(points),
        total_distance_km=round(distance, 2),
        points=[LocationResponse.model_validate(p) for p in points],
    )


async def current_locations(db: AsyncSession, assignment: Assignment) -> CurrentLocationsResponse:
    """Latest sample for each assigned user."""
    resolved = await resolve_assigned_users(db, assignment.user_ids)
    entries = []
    for user in resolved.users:
        latest = await location_crud.latest_for_user(db, assignment_id=assignment.id, user_id=user.id)
        entries.append(
            UserCurrentLocation(
                user=UserSummary.model_validate(user),
                location=LocationResponse.model_validate(latest) if latest else None,
            )
        )
    return CurrentLocationsResponse(
        assignment_id=assignment.id,
        total_users=len(entries),
        users_with_location=sum(1 for e in entries if e.location is not None),
        locations=entries,
    )


def _summarize(rows: List[Location]) -> Tuple[int, int, int, Optional[datetime], Optional[datetime]]:
    today = datetime.now(timezone.utc).date()
    auto = sum(1 for r in rows if r.tracking_status == TrackingStatus.AUTO)
    manual = len(rows) - auto
    today_count = sum(1 for r in rows if as_naive_utc(r.recorded_at).date() == today)
    recorded = [r.recorded_at for r in rows]
    first = min(recorded, key=as_naive_utc) if recorded else None
    last = max(recorded, key=as_naive_utc) if recorded else None
    return auto, manual, today_count, first, last


def _counts(rows: List[Location], key) -> List[Tuple[UUID, int]]:
    counts = {}
    for row in rows:
        counts[key(row)] = counts.get(key(row), 0) + 1
    return sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))


async def assignment_statistics(db: AsyncSession, assignment_id: UUID) -> AssignmentLocationStatistics:
    rows = await location_crud.history(db, assignment_id=assignment_id)
    auto, manual, today_count, first, last = _summarize(rows)
    return AssignmentLocationStatistics(
        assignment_id=assignment_id,
        total_locations=len(rows),
        auto_count=auto,
        manual_count=manual,
        today_count=today_count,
        first_recorded_at=first,
        last_recorded_at=last,
        by_user=[CountByUser(user_id=uid, count=c) for uid, c in _counts(rows, lambda r: r.user_id)],
    )


async def user_statistics(db: AsyncSession, user_id: UUID) -> UserLocationStatistics:
    rows = await location_crud.history(db, user_id=user_id)
    auto, manual, today_count, first, last = _summarize(rows)
    return UserLocationStatistics(
        user_id=user_id,
        total_locations=len(rows),
        auto_count=auto,
        manual_count=manual,
        today_count=today_count,
        first_recorded_at=first,
        last_recorded_at=last,
        by_assignment=[
            CountByAssignment(assignment_id=aid, count=c) for aid, c in _counts(rows, lambda r: r.assignment_id)
        ],
    )


async def nearby(
    db: AsyncSession,
    latitude: float,
    longitude: float,
    radius_km: float = 1.0,
    assignment_id: Optional[UUID] = None,
) -> List[NearbyLocation]:
    """Samples within ``radius_km``, nearest first."""
    if not MIN_RADIUS_KM <= radius_km <= MAX_RADIUS_KM:
        raise ValidationError(f"radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km")

    min_lat, max_lat, min_lon, max_lon = bounding_box(latitude, longitude, radius_km)
    candidates = await location_crud.in_box(
        db,
        min_lat=min_lat,
        max_lat=max_lat,
        min_lon=min_lon,
        max_lon=max_lon,
        assignment_id=assignment_id,
    )
    matches = []
    for loc in candidates:
        distance = haversine_km(latitude, longitude, loc.latitude, loc.longitude)
        if distance <= radius_km:
            matches.append((distance, loc))
    matches.sort(key=lambda item: item[0])
    return [
        NearbyLocation(**LocationResponse.model_validate(loc).model_dump(), distance_km=round(distance, 3))
        for distance, loc in matches
    ]
