"""Pydantic schemas."""
from fieldops.schemas.common import PaginatedResponse, MessageResponse
from fieldops.schemas.user import (
    UserResponse,
    UserSummary,
    UserCreate,
    RoleResponse,
    PermissionResponse,
)
from fieldops.schemas.auth import LoginRequest, RegisterRequest, TokenResponse

__all__ = [
    "PaginatedResponse",
    "MessageResponse",
    "UserResponse",
    "UserSummary",
    "UserCreate",
    "RoleResponse",
    "PermissionResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
]
