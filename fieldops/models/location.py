"""Location sample model."""
import enum
import uuid

from sqlalchemy import Column, String, Float, Text, DateTime, ForeignKey, Enum, Index

from fieldops.database import Base
from fieldops.db.types import GUID
from fieldops.utils.time import utcnow


class TrackingStatus(str, enum.Enum):
    """How a sample was captured."""

    AUTO = "auto"
    MANUAL = "manual"


class Location(Base):
    """A timestamped GPS sample tied to one assignment and one user."""

    __tablename__ = "locations"
    __table_args__ = (
        Index("ix_locations_assignment_user", "assignment_id", "user_id"),
        Index("ix_locations_lat_lng", "latitude", "longitude"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    assignment_id = Column(GUID(), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    address = Column(Text, nullable=True)
    tracking_status = Column(
        Enum(TrackingStatus, native_enum=False, length=10, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TrackingStatus.AUTO,
    )
    recorded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
