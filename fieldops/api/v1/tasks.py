"""Task administration endpoints."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import NotFoundError
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.task import task as task_crud
from fieldops.database import get_db
from fieldops.models.task import Task, TaskStatus
from fieldops.routing.admin_route import AdminAPIRoute
from fieldops.schemas.assignment import AssignmentResponse
from fieldops.schemas.common import PaginatedResponse
from fieldops.schemas.task import (
    TaskAssignRequest,
    TaskCreate,
    TaskDetailResponse,
    TaskLocationCount,
    TaskResponse,
    TaskStatistics,
    TaskUpdate,
)
from fieldops.services import assignment_service, task_service

router = APIRouter(route_class=AdminAPIRoute)


async def _get_task(db: AsyncSession, task_id: UUID) -> Task:
    task_obj = await task_crud.get(db, id=task_id)
    if not task_obj:
        raise NotFoundError("Task not found")
    return task_obj


@router.get("", response_model=PaginatedResponse[TaskResponse])
async def list_tasks(
    status: Optional[TaskStatus] = None,
    location: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """List tasks, those with completed assignments first."""
    tasks, total = await task_crud.search(
        db, status=status, location=location, search=search, skip=skip, limit=limit
    )
    return PaginatedResponse[TaskResponse](
        total=total,
        skip=skip,
        limit=limit,
        items=[task_service.to_task_response(t) for t in tasks],
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a task."""
    task_obj = await task_service.create_task(db, payload)
    return task_service.to_task_response(task_obj)


@router.get("/statistics", response_model=TaskStatistics)
async def task_statistics(
    db: AsyncSession = Depends(get_db),
):
    """Task and assignment totals by status."""
    tasks_by_status = await task_crud.count_by_status(db)
    assignments_by_status = await assignment_crud.count_by_status(db)
    return TaskStatistics(
        total_tasks=sum(tasks_by_status.values()),
        tasks_by_status={s.value: tasks_by_status.get(s.value, 0) for s in TaskStatus},
        total_assignments=sum(assignments_by_status.values()),
        assignments_by_status=assignments_by_status,
    )


@router.get("/by-location", response_model=List[TaskLocationCount])
async def tasks_by_location(
    db: AsyncSession = Depends(get_db),
):
    """Task counts grouped by location."""
    rows = await task_crud.count_by_location(db)
    return [TaskLocationCount(location=location, count=count) for location, count in rows]


@router.get("/{task_id}", response_model=TaskDetailResponse)
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a task with its assignment counts."""
    return await task_service.task_detail(db, await _get_task(db, task_id))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a task; setting a status switches it to manual mode."""
    task_obj = await task_service.update_task(db, await _get_task(db, task_id), payload)
    return task_service.to_task_response(task_obj)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a task without assignments."""
    await task_service.delete_task(db, await _get_task(db, task_id))


@router.post("/{task_id}/assign", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def assign_task(
    task_id: UUID,
    payload: TaskAssignRequest,
    db: AsyncSession = Depends(get_db),
):
    """Assign the task to one or more users."""
    task_obj = await _get_task(db, task_id)
    assignment = await task_service.assign_to_users(
        db,
        task_obj,
        payload.user_ids,
        on_date=payload.date,
        start_time=payload.start_time,
    )
    return await assignment_service.to_response(db, assignment)


@router.post("/{task_id}/reset-auto", response_model=TaskResponse)
async def reset_task_to_auto(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Return the task to work-hour driven status."""
    task_obj = await task_service.reset_to_auto(db, await _get_task(db, task_id))
    return task_service.to_task_response(task_obj)


@router.post("/{task_id}/mark-completed", response_model=TaskResponse)
async def mark_task_completed(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Complete a pending task that has a completed assignment."""
    task_obj = await task_service.mark_completed(db, await _get_task(db, task_id))
    return task_service.to_task_response(task_obj)
