"""Assignment (taken task) model."""
import enum
import uuid

from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from fieldops.database import Base
from fieldops.db.types import GUID, UUIDList
from fieldops.utils.time import utcnow


class AssignmentStatus(str, enum.Enum):
    """Assignment lifecycle: pending -> active -> completed."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class Assignment(Base):
    """A task handed to one or more users for a given date."""

    __tablename__ = "assignments"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    ticket_number = Column(String(32), unique=True, nullable=True, index=True)
    task_id = Column(GUID(), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    # Always assign a new list; in-place mutation is not tracked
    user_ids = Column(UUIDList(), nullable=False, default=list)
    status = Column(
        Enum(AssignmentStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AssignmentStatus.PENDING,
        index=True,
    )
    date = Column(Date, nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    task = relationship("Task", lazy="selectin")

    def has_user(self, user_id) -> bool:
        return str(user_id) in {str(uid) for uid in (self.user_ids or [])}
