"""Bootstrap utilities for ensuring core permissions, roles and the superadmin exist."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import settings
from fieldops.core.security import ROLE_DESCRIPTIONS, ROLE_PERMISSIONS, Permission as PermissionName, RoleName
from fieldops.models.user import Permission, Role, User
from fieldops.services.auth_service import AuthService

logger = logging.getLogger(__name__)


async def ensure_permissions(
    db: AsyncSession,
    *,
    names: Optional[Iterable[str]] = None,
) -> Dict[str, Permission]:
    """Ensure that the given permissions exist and return them in a mapping."""
    if names is None:
        names = [p.value for p in PermissionName]

    result = await db.execute(select(Permission))
    permission_map = {p.name: p for p in result.scalars().all()}
    created = False

    for name in names:
        if name not in permission_map:
            permission_obj = Permission(name=name)
            db.add(permission_obj)
            permission_map[name] = permission_obj
            created = True

    if created:
        await db.flush()

    return permission_map


async def ensure_roles(
    db: AsyncSession,
    *,
    role_names: Iterable[str],
    permission_map: Optional[Dict[str, Permission]] = None,
) -> Dict[str, Role]:
    """Ensure that the given roles exist and return them in a mapping.

    Newly created roles get their default permissions; existing roles are
    topped up with any default permission they are missing.
    """
    if permission_map is None:
        permission_map = await ensure_permissions(db)

    role_map: Dict[str, Role] = {}
    for role_name in role_names:
        result = await db.execute(select(Role).where(Role.name == role_name))
        role_obj = result.scalar_one_or_none()
        if role_obj is None:
            role_obj = Role(name=role_name, description=ROLE_DESCRIPTIONS.get(role_name))
            role_obj.permissions = []
            db.add(role_obj)
            logger.info("Created role %s", role_name)

        current = {p.name for p in role_obj.permissions}
        missing = [
            permission_map[p.value]
            for p in ROLE_PERMISSIONS.get(role_name, [])
            if p.value not in current and p.value in permission_map
        ]
        if missing:
            role_obj.permissions = list(role_obj.permissions) + missing

        role_map[role_name] = role_obj

    await db.commit()
    return role_map


async def ensure_default_admin(
    db: AsyncSession,
    *,
    role_map: Optional[Dict[str, Role]] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: Optional[str] = None,
) -> User:
    """Ensure that the default superadmin account exists and return it."""
    email = email or settings.DEFAULT_ADMIN_EMAIL
    password = password or settings.DEFAULT_ADMIN_PASSWORD
    name = name or settings.DEFAULT_ADMIN_NAME

    if role_map is None or RoleName.SUPERADMIN.value not in role_map:
        role_map = await ensure_roles(db, role_names=[RoleName.SUPERADMIN.value])

    superadmin_role = role_map[RoleName.SUPERADMIN.value]

    result = await db.execute(select(User).where(User.email == email))
    admin_user = result.scalar_one_or_none()
    if admin_user:
        if superadmin_role not in admin_user.roles:
            admin_user.roles = list(admin_user.roles) + [superadmin_role]
            await db.commit()
        return admin_user

    admin_user = User(
        email=email,
        password_hash=AuthService.hash_password(password),
        name=name,
    )
    admin_user.roles = [superadmin_role]
    db.add(admin_user)
    await db.commit()
    await db.refresh(admin_user)
    logger.info("Created default superadmin %s", email)
    return admin_user


async def bootstrap(db: AsyncSession) -> User:
    """Seed permissions, the built-in roles and the superadmin account."""
    permission_map = await ensure_permissions(db)
    role_map = await ensure_roles(
        db,
        role_names=[r.value for r in RoleName],
        permission_map=permission_map,
    )
    return await ensure_default_admin(db, role_map=role_map)
