"""Location schemas."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from fieldops.models.location import TrackingStatus
from fieldops.schemas.user import UserSummary

MAX_BATCH_SIZE = 100


class LocationCreate(BaseModel):
    """A single GPS sample."""

    assignment_id: UUID
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = Field(None, ge=0)
    address: Optional[str] = Field(None, max_length=500)
    tracking_status: TrackingStatus = TrackingStatus.AUTO
    recorded_at: Optional[datetime] = None


class LocationBatchCreate(BaseModel):
    locations: List[LocationCreate] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)


class LocationResponse(BaseModel):
    """Location response schema."""

    id: UUID
    assignment_id: UUID
    user_id: UUID
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None
    tracking_status: TrackingStatus
    recorded_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class BatchItemError(BaseModel):
    index: int
    detail: str


class LocationBatchResult(BaseModel):
    """Outcome of a batch upload; failures do not abort the rest."""

    created_count: int
    error_count: int
    locations: List[LocationResponse]
    errors: List[BatchItemError]


class RouteResponse(BaseModel):
    """Samples in recording order with total travelled distance."""

    assignment_id: UUID
    user_id: UUID
    total_points: int
    total_distance_km: float
    points: List[LocationResponse]


class UserCurrentLocation(BaseModel):
    user: UserSummary
    location: Optional[LocationResponse] = None


class CurrentLocationsResponse(BaseModel):
    """Latest sample per assigned user."""

    assignment_id: UUID
    total_users: int
    users_with_location: int
    locations: List[UserCurrentLocation]


class CountByUser(BaseModel):
    user_id: UUID
    count: int


class CountByAssignment(BaseModel):
    assignment_id: UUID
    count: int


class AssignmentLocationStatistics(BaseModel):
    assignment_id: UUID
    total_locations: int
    auto_count: int
    manual_count: int
    today_count: int
    first_recorded_at: Optional[datetime] = None
    last_recorded_at: Optional[datetime] = None
    by_user: List[CountByUser]


class UserLocationStatistics(BaseModel):
    user_id: UUID
    total_locations: int
    auto_count: int
    manual_count: int
    today_count: int
    first_recorded_at: Optional[datetime] = None
    last_recorded_at: Optional[datetime] = None
    by_assignment: List[CountByAssignment]


class NearbyLocation(LocationResponse):
    distance_km: float
