"""Location endpoints: employee recording plus admin monitoring."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import ForbiddenError, NotFoundError
from fieldops.core.security import ADMIN_ROLES
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.location import location as location_crud
from fieldops.database import get_db
from fieldops.dependencies import get_current_active_user
from fieldops.models.assignment import Assignment
from fieldops.models.location import TrackingStatus
from fieldops.models.user import User
from fieldops.routing.admin_route import AdminAPIRoute
from fieldops.schemas.common import MessageResponse, PaginatedResponse
from fieldops.schemas.location import (
    AssignmentLocationStatistics,
    CurrentLocationsResponse,
    LocationBatchCreate,
    LocationBatchResult,
    LocationCreate,
    LocationResponse,
    NearbyLocation,
    RouteResponse,
    UserLocationStatistics,
)
from fieldops.services import location_service
from fieldops.utils.permissions import has_any_role

# Mounted at /locations
router = APIRouter()

# Mounted under /admin/locations
admin_router = APIRouter(route_class=AdminAPIRoute)


async def _get_assignment(db: AsyncSession, assignment_id: UUID) -> Assignment:
    assignment = await assignment_crud.get(db, id=assignment_id)
    if not assignment:
        raise NotFoundError("Assignment not found")
    return assignment


async def _page(
    db: AsyncSession,
    *,
    skip: int,
    limit: int,
    **filters,
) -> PaginatedResponse[LocationResponse]:
    rows = await location_crud.history(db, skip=skip, limit=limit, **filters)
    total = await location_crud.count(db, **filters)
    return PaginatedResponse[LocationResponse](
        total=total,
        skip=skip,
        limit=limit,
        items=[LocationResponse.model_validate(r) for r in rows],
    )


@router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def record_location(
    payload: LocationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Record one GPS sample for an active assignment."""
    return await location_service.record_location(db, payload, current_user)


@router.post("/batch", response_model=LocationBatchResult, status_code=status.HTTP_201_CREATED)
async def record_batch(
    payload: LocationBatchCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Record up to 100 samples; 422 when none could be stored."""
    result = await location_service.record_batch(db, payload.locations, current_user)
    if result.created_count == 0:
        response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return result


@router.get("/my", response_model=PaginatedResponse[LocationResponse])
async def my_locations(
    assignment_id: Optional[UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """The caller's own samples, newest first."""
    return await _page(db, skip=skip, limit=limit, user_id=current_user.id, assignment_id=assignment_id)


@router.get("/my/statistics", response_model=UserLocationStatistics)
async def my_location_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Tracking statistics for the caller."""
    return await location_service.user_statistics(db, current_user.id)


@router.get("/tasks/{assignment_id}", response_model=PaginatedResponse[LocationResponse])
async def assignment_locations(
    assignment_id: UUID,
    user_id: Optional[UUID] = None,
    tracking_status: Optional[TrackingStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Samples of an assignment the caller is on."""
    assignment = await _get_assignment(db, assignment_id)
    if not assignment.has_user(current_user.id) and not has_any_role(current_user, ADMIN_ROLES):
        raise ForbiddenError("Unauthorized to view locations for this task")
    return await _page(
        db,
        skip=skip,
        limit=limit,
        assignment_id=assignment_id,
        user_id=user_id,
        tracking_status=tracking_status,
    )


@router.get("/tasks/{assignment_id}/route", response_model=RouteResponse)
async def my_route(
    assignment_id: UUID,
    user_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Route of one user (the caller by default) on an assignment."""
    await _get_assignment(db, assignment_id)
    user_id = user_id or current_user.id
    if user_id != current_user.id and not has_any_role(current_user, ADMIN_ROLES):
        raise ForbiddenError("Unauthorized to view this route")
    return await location_service.route(db, assignment_id, user_id)


@admin_router.get("/tasks/{assignment_id}", response_model=PaginatedResponse[LocationResponse])
async def admin_assignment_locations(
    assignment_id: UUID,
    user_id: Optional[UUID] = None,
    tracking_status: Optional[TrackingStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """All samples of an assignment."""
    await _get_assignment(db, assignment_id)
    return await _page(
        db,
        skip=skip,
        limit=limit,
        assignment_id=assignment_id,
        user_id=user_id,
        tracking_status=tracking_status,
    )


@admin_router.get("/tasks/{assignment_id}/current", response_model=CurrentLocationsResponse)
async def current_locations(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Latest sample of each assigned user."""
    return await location_service.current_locations(db, await _get_assignment(db, assignment_id))


@admin_router.get("/tasks/{assignment_id}/statistics", response_model=AssignmentLocationStatistics)
async def assignment_location_statistics(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Tracking statistics for an assignment."""
    await _get_assignment(db, assignment_id)
    return await location_service.assignment_statistics(db, assignment_id)


@admin_router.get("/tasks/{assignment_id}/route", response_model=RouteResponse)
async def admin_route(
    assignment_id: UUID,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Route of one user on an assignment."""
    await _get_assignment(db, assignment_id)
    return await location_service.route(db, assignment_id, user_id)


@admin_router.get("/users/{user_id}/statistics", response_model=UserLocationStatistics)
async def user_location_statistics(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Tracking statistics for any user."""
    return await location_service.user_statistics(db, user_id)


@admin_router.get("/nearby", response_model=List[NearbyLocation])
async def nearby_locations(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(1.0, ge=location_service.MIN_RADIUS_KM, le=location_service.MAX_RADIUS_KM),
    assignment_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    """Samples within ``radius`` km of a point, nearest first."""
    return await location_service.nearby(db, latitude, longitude, radius, assignment_id=assignment_id)


@admin_router.delete("/{location_id}", response_model=MessageResponse)
async def delete_location(
    location_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete one location record."""
    if not await location_crud.remove(db, id=location_id):
        raise NotFoundError("Location not found")
    return MessageResponse(message="Location deleted successfully")
