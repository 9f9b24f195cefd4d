"""Assignment endpoints for admins and for assigned employees."""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import NotFoundError
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.database import get_db
from fieldops.dependencies import get_current_active_user
from fieldops.models.assignment import Assignment, AssignmentStatus
from fieldops.models.user import User
from fieldops.routing.admin_route import AdminAPIRoute
from fieldops.schemas.assignment import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentStatistics,
    AssignmentUpdate,
)
from fieldops.schemas.common import MessageResponse, PaginatedResponse
from fieldops.services import assignment_service

# Mounted under /admin
router = APIRouter(route_class=AdminAPIRoute)

# Mounted at /my-tasks
my_tasks_router = APIRouter()


async def _get_assignment(db: AsyncSession, assignment_id: UUID) -> Assignment:
    assignment = await assignment_crud.get(db, id=assignment_id)
    if not assignment:
        raise NotFoundError("Assignment not found")
    return assignment


@router.get("/assignments", response_model=PaginatedResponse[AssignmentResponse])
async def list_assignments(
    user_id: Optional[UUID] = None,
    task_id: Optional[UUID] = None,
    status: Optional[AssignmentStatus] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """List assignments with optional filters."""
    assignments, total = await assignment_crud.search(
        db,
        user_id=user_id,
        task_id=task_id,
        status=status,
        on_date=on_date,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
    return PaginatedResponse[AssignmentResponse](
        total=total,
        skip=skip,
        limit=limit,
        items=await assignment_service.to_responses(db, assignments),
    )


@router.post("/assignments", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    payload: AssignmentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an assignment."""
    assignment = await assignment_service.create_assignment(
        db,
        task_id=payload.task_id,
        user_ids=payload.user_ids,
        on_date=payload.date,
        start_time=payload.start_time,
        status=payload.status,
    )
    return await assignment_service.to_response(db, assignment)


@router.get("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get an assignment with its users and duration."""
    return await assignment_service.to_response(db, await _get_assignment(db, assignment_id))


@router.put("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def update_assignment(
    assignment_id: UUID,
    payload: AssignmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update an assignment."""
    assignment = await assignment_service.update_assignment(
        db, await _get_assignment(db, assignment_id), payload
    )
    return await assignment_service.to_response(db, assignment)


@router.delete("/assignments/{assignment_id}", response_model=MessageResponse)
async def delete_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete an assignment that is not completed."""
    await assignment_service.delete_assignment(db, await _get_assignment(db, assignment_id))
    return MessageResponse(message="Task assignment deleted successfully")


@router.put("/assignments/{assignment_id}/cancel", response_model=AssignmentResponse)
async def cancel_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Reset an assignment to pending."""
    assignment = await assignment_service.cancel_assignment(db, await _get_assignment(db, assignment_id))
    return await assignment_service.to_response(db, assignment)


@router.get("/users/{user_id}/statistics", response_model=AssignmentStatistics)
async def user_assignment_statistics(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Assignment counts for one user."""
    return await assignment_service.user_statistics(db, user_id)


@my_tasks_router.get("", response_model=PaginatedResponse[AssignmentResponse])
async def my_tasks(
    status: Optional[AssignmentStatus] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Assignments that include the current user, latest date first."""
    assignments, total = await assignment_crud.search(
        db,
        user_id=current_user.id,
        status=status,
        on_date=on_date,
        skip=skip,
        limit=limit,
        order_by_date=True,
    )
    return PaginatedResponse[AssignmentResponse](
        total=total,
        skip=skip,
        limit=limit,
        items=await assignment_service.to_responses(db, assignments),
    )


@my_tasks_router.get("/statistics", response_model=AssignmentStatistics)
async def my_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Assignment counts for the current user."""
    return await assignment_service.user_statistics(db, current_user.id)


@my_tasks_router.put("/{assignment_id}/start", response_model=AssignmentResponse)
async def start_task(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Start a pending assignment."""
    assignment = await assignment_service.start_assignment(
        db, await _get_assignment(db, assignment_id), current_user
    )
    return await assignment_service.to_response(db, assignment)


@my_tasks_router.put("/{assignment_id}/complete", response_model=AssignmentResponse)
async def complete_task(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Complete an active assignment."""
    assignment = await assignment_service.complete_assignment(
        db, await _get_assignment(db, assignment_id), current_user
    )
    return await assignment_service.to_response(db, assignment)
