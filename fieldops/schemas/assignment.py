"""Assignment schemas."""
from datetime import date as date_type, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fieldops.models.assignment import AssignmentStatus
from fieldops.schemas.common import reject_null
from fieldops.schemas.user import UserSummary


class AssignmentCreate(BaseModel):
    """Assignment creation schema."""

    task_id: UUID
    user_ids: List[UUID] = Field(..., min_length=1)
    date: date_type
    start_time: Optional[datetime] = None
    status: AssignmentStatus = AssignmentStatus.PENDING


class AssignmentUpdate(BaseModel):
    """Assignment update schema."""

    user_ids: Optional[List[UUID]] = Field(None, min_length=1)
    date: Optional[date_type] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[AssignmentStatus] = None

    _not_null = field_validator("user_ids", "date", "status")(reject_null)


class TaskBrief(BaseModel):
    """Task fields embedded in assignment payloads."""

    id: UUID
    ticket_number: Optional[str] = None
    title: str
    location: Optional[str] = None

    class Config:
        from_attributes = True


class AssignmentResponse(BaseModel):
    """Assignment with its users resolved.

    ``missing_user_ids`` lists stored ids that no longer match a user.
    """

    id: UUID
    ticket_number: Optional[str] = None
    task_id: UUID
    task: Optional[TaskBrief] = None
    user_ids: List[UUID]
    assigned_users: List[UserSummary] = []
    missing_user_ids: List[UUID] = []
    status: AssignmentStatus
    computed_status: str
    is_within_work_hours: bool
    date: date_type
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class AssignmentStatistics(BaseModel):
    """Assignment counts for one user."""

    user_id: UUID
    total_assignments: int
    pending: int
    active: int
    completed: int
