"""Work report model."""
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey

from fieldops.database import Base
from fieldops.db.types import GUID, JSONBType
from fieldops.utils.time import utcnow


class Report(Base):
    """A written report filed by an assigned user against an assignment."""

    __tablename__ = "reports"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    ticket_number = Column(String(32), unique=True, nullable=True, index=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(GUID(), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    # Photo references (storage keys or URLs); uploading is done elsewhere
    photos = Column(JSONBType(), nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
