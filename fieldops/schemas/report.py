"""Report schemas."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fieldops.schemas.common import reject_null
from fieldops.schemas.user import UserSummary

MAX_PHOTOS = 10


class ReportCreate(BaseModel):
    """Report creation schema."""

    assignment_id: UUID
    content: str = Field(..., min_length=1)
    photos: List[str] = Field(default_factory=list, max_length=MAX_PHOTOS)


class ReportUpdate(BaseModel):
    """Report update schema; ``photos`` replaces the stored list."""

    content: Optional[str] = Field(None, min_length=1)
    photos: Optional[List[str]] = Field(None, max_length=MAX_PHOTOS)

    _not_null = field_validator("content", "photos")(reject_null)


class ReportResponse(BaseModel):
    """Report with its author and the assignment and task it belongs to."""

    id: UUID
    ticket_number: Optional[str] = None
    user_id: UUID
    user: Optional[UserSummary] = None
    assignment_id: UUID
    assignment_ticket_number: Optional[str] = None
    task_id: Optional[UUID] = None
    task_title: Optional[str] = None
    content: str
    photos: List[str] = []
    created_at: datetime
    updated_at: datetime


class ReportStatistics(BaseModel):
    total_reports: int
    reports_this_month: int
    reports_this_week: int
