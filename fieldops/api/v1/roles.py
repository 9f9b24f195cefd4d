"""Role and permission administration endpoints."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.exceptions import ConflictError, NotFoundError, ValidationError
from fieldops.crud.user import permission as permission_crud, role as role_crud, user as user_crud
from fieldops.database import get_db
from fieldops.models.user import Permission, Role, User
from fieldops.routing.admin_route import AdminAPIRoute
from fieldops.schemas.user import (
    PermissionCreate,
    PermissionNames,
    PermissionResponse,
    RoleCreate,
    RoleNames,
    RoleResponse,
    UserResponse,
)

router = APIRouter(route_class=AdminAPIRoute)


async def _permissions_by_name(db: AsyncSession, names: List[str]) -> List[Permission]:
    """Look up permissions, failing with the names that do not exist."""
    found = await permission_crud.get_by_names(db, names=names)
    missing = sorted(set(names) - {p.name for p in found})
    if missing:
        raise ValidationError({"message": "Unknown permissions", "permissions": missing})
    return found


async def _roles_by_name(db: AsyncSession, names: List[str]) -> List[Role]:
    found = await role_crud.get_by_names(db, names=names)
    missing = sorted(set(names) - {r.name for r in found})
    if missing:
        raise ValidationError({"message": "Unknown roles", "roles": missing})
    return found


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    user_obj = await user_crud.get(db, id=user_id)
    if not user_obj:
        raise NotFoundError("User not found")
    return user_obj


async def _save_user(db: AsyncSession, user_obj: User) -> UserResponse:
    db.add(user_obj)
    await db.commit()
    await db.refresh(user_obj)
    return UserResponse.from_user(user_obj)


@router.get("/roles", response_model=List[RoleResponse])
async def list_roles(
    db: AsyncSession = Depends(get_db),
):
    """List all roles with their permissions."""
    return await role_crud.get_all(db)


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new role."""
    if await role_crud.get_by_name(db, name=payload.name):
        raise ConflictError("Role with this name already exists")

    role_obj = Role(name=payload.name, description=payload.description)
    role_obj.permissions = await _permissions_by_name(db, payload.permissions)
    db.add(role_obj)
    await db.commit()
    await db.refresh(role_obj)
    return role_obj


@router.post("/roles/{role_id}/permissions", response_model=RoleResponse)
async def sync_role_permissions(
    role_id: UUID,
    payload: PermissionNames,
    db: AsyncSession = Depends(get_db),
):
    """Replace a role's permissions with exactly the given set."""
    role_obj = await role_crud.get(db, id=role_id)
    if not role_obj:
        raise NotFoundError("Role not found")

    role_obj.permissions = await _permissions_by_name(db, payload.permissions)
    db.add(role_obj)
    await db.commit()
    await db.refresh(role_obj)
    return role_obj


@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(
    db: AsyncSession = Depends(get_db),
):
    """List all permissions."""
    return await permission_crud.get_all(db)


@router.post("/permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    payload: PermissionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new permission."""
    if await permission_crud.get_by_name(db, name=payload.name):
        raise ConflictError("Permission with this name already exists")
    return await permission_crud.create(db, obj_in={"name": payload.name})


@router.post("/users/{user_id}/roles", response_model=UserResponse)
async def assign_roles(
    user_id: UUID,
    payload: RoleNames,
    db: AsyncSession = Depends(get_db),
):
    """Add roles to a user."""
    user_obj = await _get_user(db, user_id)
    roles = await _roles_by_name(db, payload.roles)
    current = {r.name for r in user_obj.roles}
    user_obj.roles = list(user_obj.roles) + [r for r in roles if r.name not in current]
    return await _save_user(db, user_obj)


@router.delete("/users/{user_id}/roles", response_model=UserResponse)
async def remove_roles(
    user_id: UUID,
    payload: RoleNames,
    db: AsyncSession = Depends(get_db),
):
    """Remove roles from a user."""
    user_obj = await _get_user(db, user_id)
    await _roles_by_name(db, payload.roles)
    user_obj.roles = [r for r in user_obj.roles if r.name not in set(payload.roles)]
    return await _save_user(db, user_obj)


@router.post("/users/{user_id}/permissions", response_model=UserResponse)
async def give_permissions(
    user_id: UUID,
    payload: PermissionNames,
    db: AsyncSession = Depends(get_db),
):
    """Grant permissions to a user directly."""
    user_obj = await _get_user(db, user_id)
    permissions = await _permissions_by_name(db, payload.permissions)
    current = {p.name for p in user_obj.permissions}
    user_obj.permissions = list(user_obj.permissions) + [p for p in permissions if p.name not in current]
    return await _save_user(db, user_obj)


@router.delete("/users/{user_id}/permissions", response_model=UserResponse)
async def revoke_permissions(
    user_id: UUID,
    payload: PermissionNames,
    db: AsyncSession = Depends(get_db),
):
    """Revoke directly granted permissions from a user."""
    user_obj = await _get_user(db, user_id)
    await _permissions_by_name(db, payload.permissions)
    user_obj.permissions = [p for p in user_obj.permissions if p.name not in set(payload.permissions)]
    return await _save_user(db, user_obj)
