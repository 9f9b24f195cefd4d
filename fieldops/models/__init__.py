"""Database models."""
from fieldops.models.user import User, Role, Permission, UserStatus
from fieldops.models.token import AccessToken
from fieldops.models.task import Task, TaskStatus
from fieldops.models.assignment import Assignment, AssignmentStatus
from fieldops.models.location import Location, TrackingStatus
from fieldops.models.report import Report

__all__ = [
    "User",
    "Role",
    "Permission",
    "UserStatus",
    "AccessToken",
    "Task",
    "TaskStatus",
    "Assignment",
    "AssignmentStatus",
    "Location",
    "TrackingStatus",
    "Report",
]
