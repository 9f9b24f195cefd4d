"""User endpoints: admin management plus the caller's own account."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from fieldops.core.security import ADMIN_ROLES, RoleName
from fieldops.crud.user import role as role_crud, user as user_crud
from fieldops.database import get_db
from fieldops.dependencies import get_current_active_user, require_role
from fieldops.models.user import User, UserStatus
from fieldops.routing.admin_route import AdminAPIRoute
from fieldops.schemas.common import PaginatedResponse
from fieldops.schemas.user import ProfileUpdate, UserCreate, UserResponse, UserStatusUpdate
from fieldops.utils.permissions import has_any_role

# Mounted under /admin
router = APIRouter(route_class=AdminAPIRoute)

# Mounted at the API root
account_router = APIRouter()


@account_router.get("/user", response_model=UserResponse)
async def get_user_info(
    current_user: User = Depends(get_current_active_user),
):
    """Current user with roles and permissions."""
    return UserResponse.from_user(current_user)


@account_router.put("/profile/{user_id}", response_model=UserResponse)
async def update_profile(
    user_id: UUID,
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Update your own profile; admins may update anyone's."""
    if user_id != current_user.id and not has_any_role(current_user, ADMIN_ROLES):
        raise ForbiddenError("You can only update your own profile")

    user_obj = await user_crud.get(db, id=user_id)
    if not user_obj:
        raise NotFoundError("User not found")

    if payload.email and payload.email != user_obj.email:
        if await user_crud.get_by_email(db, email=payload.email):
            raise ConflictError("User with this email already exists")

    updated = await user_crud.update(db, db_obj=user_obj, obj_in=payload)
    return UserResponse.from_user(updated)


@router.get("/users", response_model=PaginatedResponse[UserResponse])
async def list_users(
    role: Optional[str] = None,
    status: Optional[UserStatus] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """List users with optional filters."""
    users, total = await user_crud.search(
        db,
        role=role,
        status=status,
        department=department,
        search=search,
        skip=skip,
        limit=limit,
    )
    return PaginatedResponse[UserResponse](
        total=total,
        skip=skip,
        limit=limit,
        items=[UserResponse.from_user(u) for u in users],
    )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a user with one role."""
    if await user_crud.get_by_email(db, email=payload.email):
        raise ConflictError("User with this email already exists")

    role_obj = await role_crud.get_by_name(db, name=payload.role)
    if role_obj is None:
        raise ValidationError(f"Role '{payload.role}' does not exist")

    new_user = await user_crud.create(db, obj_in=payload, roles=[role_obj])
    return UserResponse.from_user(new_user)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a user by ID."""
    user_obj = await user_crud.get(db, id=user_id)
    if not user_obj:
        raise NotFoundError("User not found")
    return UserResponse.from_user(user_obj)


@router.put("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: UUID,
    payload: UserStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Activate or deactivate a user."""
    user_obj = await user_crud.get(db, id=user_id)
    if not user_obj:
        raise NotFoundError("User not found")
    if user_obj.id == current_user.id and payload.status == UserStatus.INACTIVE:
        raise ValidationError("You cannot deactivate your own account")

    updated = await user_crud.update_status(db, db_obj=user_obj, status=payload.status)
    return UserResponse.from_user(updated)


@router.get("/departments", response_model=List[str])
async def list_departments(
    db: AsyncSession = Depends(get_db),
):
    """Distinct departments in use."""
    return await user_crud.departments(db)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(RoleName.SUPERADMIN.value)),
):
    """Delete a user (superadmin only)."""
    if user_id == current_user.id:
        raise ValidationError("You cannot delete your own account")
    user_obj = await user_crud.get(db, id=user_id)
    if not user_obj:
        raise NotFoundError("User not found")
    await user_crud.remove(db, id=user_id)
