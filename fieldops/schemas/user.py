"""User, role and permission schemas."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from fieldops.models.user import UserStatus
from fieldops.schemas.common import reject_null


def _names(value):
    """Accept ORM objects or plain strings and return names."""
    if value is None:
        return []
    return [item if isinstance(item, str) else item.name for item in value]


class PermissionCreate(BaseModel):
    """Permission creation schema."""

    name: str = Field(..., min_length=1, max_length=100)


class PermissionResponse(BaseModel):
    """Permission response schema."""

    id: UUID
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    """Role creation schema."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: List[str] = []


class RoleResponse(BaseModel):
    """Role response schema."""

    id: UUID
    name: str
    description: Optional[str] = None
    permissions: List[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("permissions", mode="before")
    @classmethod
    def _permission_names(cls, value):
        return _names(value)


class PermissionNames(BaseModel):
    """A list of permission names to grant, revoke or sync."""

    permissions: List[str]


class RoleNames(BaseModel):
    """A list of role names to assign or remove."""

    roles: List[str] = Field(..., min_length=1)


class UserSummary(BaseModel):
    """Short user representation embedded in other payloads."""

    id: UUID
    name: str
    email: EmailStr
    department: Optional[str] = None
    position: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """User response schema with flattened roles and permissions."""

    id: UUID
    name: str
    email: EmailStr
    phone_number: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    address: Optional[str] = None
    status: UserStatus
    last_login_at: Optional[datetime] = None
    roles: List[str] = []
    permissions: List[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        from fieldops.utils.permissions import get_role_names, get_user_permissions

        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone_number=user.phone_number,
            department=user.department,
            position=user.position,
            address=user.address,
            status=user.status,
            last_login_at=user.last_login_at,
            roles=sorted(get_role_names(user)),
            permissions=sorted(get_user_permissions(user)),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserCreate(BaseModel):
    """Admin user creation schema."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: str
    phone_number: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE


class UserStatusUpdate(BaseModel):
    """User status change."""

    status: UserStatus


class ProfileUpdate(BaseModel):
    """Profile update schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    phone_number: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None

    _not_null = field_validator("name", "email", "password")(reject_null)
