"""Task model."""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, Time, Boolean, Enum

from fieldops.config import settings
from fieldops.database import Base
from fieldops.db.types import GUID
from fieldops.utils.time import utcnow


class TaskStatus(str, enum.Enum):
    """Task status."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    INACTIVE = "inactive"


class Task(Base):
    """A unit of field work with a human-readable ticket number."""

    __tablename__ = "tasks"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    ticket_number = Column(String(32), unique=True, nullable=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True, index=True)
    status = Column(
        Enum(TaskStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TaskStatus.PENDING,
    )
    # Daily work hours; outside them an automatic task reads as inactive
    start_time = Column(Time, nullable=False, default=lambda: settings.WORK_DAY_START)
    end_time = Column(Time, nullable=False, default=lambda: settings.WORK_DAY_END)
    manual_override = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
