"""Task schemas."""
from datetime import date as date_type, datetime, time
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fieldops.models.task import TaskStatus
from fieldops.schemas.common import reject_null


class TaskCreate(BaseModel):
    """Task creation schema.

    Supplying ``status`` pins it and switches the task to manual mode.
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    status: Optional[TaskStatus] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class TaskUpdate(BaseModel):
    """Task update schema."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    status: Optional[TaskStatus] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    _not_null = field_validator("title", "status", "start_time", "end_time")(reject_null)


class TaskResponse(BaseModel):
    """Task response schema."""

    id: UUID
    ticket_number: Optional[str] = None
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    status: TaskStatus
    computed_status: Optional[TaskStatus] = None
    is_within_work_hours: Optional[bool] = None
    start_time: time
    end_time: time
    manual_override: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AssignmentCounts(BaseModel):
    """Assignment counts per status."""

    total: int = 0
    pending: int = 0
    active: int = 0
    completed: int = 0


class TaskDetailResponse(TaskResponse):
    """Task with assignment statistics."""

    assignment_stats: AssignmentCounts


class TaskAssignRequest(BaseModel):
    """Assign a task to users as one new assignment."""

    user_ids: List[UUID] = Field(..., min_length=1)
    date: Optional[date_type] = None
    start_time: Optional[datetime] = None


class TaskStatistics(BaseModel):
    """Task and assignment totals."""

    total_tasks: int
    tasks_by_status: Dict[str, int]
    total_assignments: int
    assignments_by_status: Dict[str, int]


class TaskLocationCount(BaseModel):
    location: Optional[str] = None
    count: int
