"""Work report endpoints."""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import ForbiddenError, NotFoundError
from fieldops.core.security import Permission
from fieldops.crud.report import report as report_crud
from fieldops.database import get_db
from fieldops.dependencies import get_current_active_user, require_permission
from fieldops.models.user import User
from fieldops.routing.admin_route import AdminAPIRoute
from fieldops.schemas.common import MessageResponse, PaginatedResponse
from fieldops.schemas.report import ReportCreate, ReportResponse, ReportStatistics, ReportUpdate
from fieldops.services import report_service

# Mounted at /reports
router = APIRouter()

# Mounted under /admin/reports
admin_router = APIRouter(route_class=AdminAPIRoute)


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.REPORT_CREATE)),
):
    """File a report for an assignment you are on."""
    row = await report_service.create_report(db, payload, current_user)
    return report_service.to_response(row)


@router.get("/my", response_model=PaginatedResponse[ReportResponse])
async def my_reports(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(15, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """The caller's reports, newest first."""
    return await report_service.page(
        db,
        skip=skip,
        limit=limit,
        user_id=current_user.id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/statistics/my", response_model=ReportStatistics)
async def my_report_statistics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return await report_service.statistics(db, user_id=current_user.id)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Report details."""
    row = await report_service.get_detailed(db, report_id)
    if not report_service.can_view(row, current_user):
        raise ForbiddenError("Unauthorized to view this report")
    return report_service.to_response(row)


@router.put("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: UUID,
    payload: ReportUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Update your own report; admins may update any."""
    report = await report_crud.get(db, id=report_id)
    if not report:
        raise NotFoundError("Report not found")
    if not report_service.can_edit(report, current_user):
        raise ForbiddenError("Unauthorized")
    row = await report_service.update_report(db, report, payload)
    return report_service.to_response(row)


@admin_router.get("", response_model=PaginatedResponse[ReportResponse])
async def list_reports(
    user_id: Optional[UUID] = None,
    assignment_id: Optional[UUID] = None,
    task_id: Optional[UUID] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(15, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """All reports with optional filters."""
    return await report_service.page(
        db,
        skip=skip,
        limit=limit,
        user_id=user_id,
        assignment_id=assignment_id,
        task_id=task_id,
        search=search,
    )


@admin_router.get("/statistics", response_model=ReportStatistics)
async def report_statistics(
    user_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
):
    """Report totals, optionally for one user."""
    return await report_service.statistics(db, user_id=user_id)


@admin_router.get("/tasks/{task_id}", response_model=List[ReportResponse])
async def task_reports(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Every report filed on any assignment of a task."""
    rows, _ = await report_crud.search(db, limit=None, task_id=task_id)
    return [report_service.to_response(row) for row in rows]


@admin_router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(
    report_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete one report."""
    if not await report_crud.remove(db, id=report_id):
        raise NotFoundError("Report not found")
    return MessageResponse(message="Report deleted successfully")
