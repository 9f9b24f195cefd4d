"""Task status rules and task workflows."""
import logging
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import settings
from fieldops.core.exceptions import ValidationError
from fieldops.crud.assignment import assignment as assignment_crud
from fieldops.crud.task import task as task_crud
from fieldops.models.assignment import Assignment, AssignmentStatus
from fieldops.models.task import Task, TaskStatus
from fieldops.schemas.task import (
    AssignmentCounts,
    TaskCreate,
    TaskDetailResponse,
    TaskResponse,
    TaskUpdate,
)
from fieldops.services.ticket_service import create_with_ticket

logger = logging.getLogger(__name__)


def is_within_work_hours(
    start_time: Optional[time],
    end_time: Optional[time],
    now: Optional[time] = None,
) -> bool:
    """Whether ``now`` falls inside the inclusive work-hour window."""
    start_time = start_time or settings.WORK_DAY_START
    end_time = end_time or settings.WORK_DAY_END
    if now is None:
        now = datetime.now().time()
    return start_time <= now.replace(microsecond=0) <= end_time


def compute_task_status(
    status: TaskStatus,
    manual_override: bool,
    start_time: Optional[time],
    end_time: Optional[time],
    now: Optional[time] = None,
) -> TaskStatus:
    """Effective task status.

    A manually set status wins; otherwise the task is active inside its
    work hours and inactive outside them.
    """
    if manual_override:
        return status
    if is_within_work_hours(start_time, end_time, now):
        return TaskStatus.ACTIVE
    return TaskStatus.INACTIVE


def to_task_response(task: Task, now: Optional[time] = None) -> TaskResponse:
    response = TaskResponse.model_validate(task)
    response.is_within_work_hours = is_within_work_hours(task.start_time, task.end_time, now)
    response.computed_status = compute_task_status(
        task.status, task.manual_override, task.start_time, task.end_time, now
    )
    return response


def _check_hours(start_time: Optional[time], end_time: Optional[time]) -> None:
    if start_time and end_time and end_time <= start_time:
        raise ValidationError("end_time must be after start_time")


async def create_task(db: AsyncSession, data: TaskCreate) -> Task:
    """Create a task with the next ``TSK`` ticket number."""
    _check_hours(data.start_time, data.end_time)
    values = data.model_dump(exclude_unset=True, exclude_none=True)
    # An explicit status pins the task to manual mode
    values["manual_override"] = data.status is not None

    task = await create_with_ticket(
        db,
        Task,
        settings.TASK_TICKET_PREFIX,
        lambda ticket_number: Task(ticket_number=ticket_number, **values),
    )
    logger.info("Created task %s", task.ticket_number)
    return task


async def update_task(db: AsyncSession, task: Task, data: TaskUpdate) -> Task:
    values = data.model_dump(exclude_unset=True)
    _check_hours(values.get("start_time", task.start_time), values.get("end_time", task.end_time))
    if values.get("status") is not None:
        values["manual_override"] = True
    return await task_crud.update(db, db_obj=task, obj_in=values)


async def task_detail(db: AsyncSession, task: Task) -> TaskDetailResponse:
    counts = await assignment_crud.count_for_task(db, task_id=task.id)
    return TaskDetailResponse(
        **to_task_response(task).model_dump(),
        assignment_stats=AssignmentCounts(
            total=sum(counts.values()),
            pending=counts.get(AssignmentStatus.PENDING.value, 0),
            active=counts.get(AssignmentStatus.ACTIVE.value, 0),
            completed=counts.get(AssignmentStatus.COMPLETED.value, 0),
        ),
    )


async def delete_task(db: AsyncSession, task: Task) -> None:
    """Delete a task that has no assignments."""
    counts = await assignment_crud.count_for_task(db, task_id=task.id)
    if sum(counts.values()):
        raise ValidationError("Cannot delete task with existing assignments")
    await task_crud.remove(db, id=task.id)


async def reset_to_auto(db: AsyncSession, task: Task) -> Task:
    """Hand status control back to the work-hour rule."""
    return await task_crud.update(db, db_obj=task, obj_in={"manual_override": False})


async def mark_completed(db: AsyncSession, task: Task) -> Task:
    """Close a pending task once at least one assignment is completed."""
    current = compute_task_status(task.status, task.manual_override, task.start_time, task.end_time)
    if current != TaskStatus.PENDING:
        raise ValidationError("Only pending tasks can be marked as completed")

    counts = await assignment_crud.count_for_task(db, task_id=task.id)
    if not counts.get(AssignmentStatus.COMPLETED.value):
        raise ValidationError(
            "No completed assignments found. At least one assignment must be "
            "completed before marking task as completed."
        )
    return await task_crud.update(
        db,
        db_obj=task,
        obj_in={"status": TaskStatus.COMPLETED, "manual_override": True},
    )


async def assign_to_users(
    db: AsyncSession,
    task: Task,
    user_ids,
    on_date: Optional[date] = None,
    start_time: Optional[datetime] = None,
) -> Assignment:
    """Create one pending assignment for all ``user_ids`` and pin the task to pending."""
    from fieldops.services import assignment_service

    await assignment_service.ensure_users_exist(db, user_ids)
    await task_crud.update(
        db,
        db_obj=task,
        obj_in={"status": TaskStatus.PENDING, "manual_override": True},
    )
    return await assignment_service.create_assignment(
        db,
        task_id=task.id,
        user_ids=user_ids,
        on_date=on_date or date.today(),
        start_time=start_time,
    )
