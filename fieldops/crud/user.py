"""User, role and permission CRUD operations."""
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.base import CRUDBase
from fieldops.models.user import User, Role, Permission, UserStatus, user_role_association
from fieldops.schemas.user import UserCreate, ProfileUpdate
from fieldops.utils.security import get_password_hash


class CRUDUser(CRUDBase[User, UserCreate, ProfileUpdate]):
    """CRUD operations for User."""

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get user by email."""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_ids(self, db: AsyncSession, *, ids: Iterable) -> List[User]:
        ids = list(ids)
        if not ids:
            return []
        result = await db.execute(select(User).where(User.id.in_(ids)))
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, *, obj_in: UserCreate, roles: Iterable[Role] = ()) -> User:
        """Create a new user with roles."""
        user_data = obj_in.model_dump(exclude={"password", "role"})
        db_obj = User(**user_data, password_hash=get_password_hash(obj_in.password))
        db_obj.roles = list(roles)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: User, obj_in: ProfileUpdate) -> User:
        """Update profile fields and optionally the password."""
        update_data = obj_in.model_dump(exclude_unset=True, exclude={"password"})
        if obj_in.password:
            update_data["password_hash"] = get_password_hash(obj_in.password)
        return await super().update(db, db_obj=db_obj, obj_in=update_data)

    async def update_status(self, db: AsyncSession, *, db_obj: User, status: UserStatus) -> User:
        return await super().update(db, db_obj=db_obj, obj_in={"status": status})

    async def search(
        self,
        db: AsyncSession,
        *,
        role: Optional[str] = None,
        status: Optional[UserStatus] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[User], int]:
        """Filtered page of users and the total matching count."""
        query = select(User)
        if role:
            query = query.where(
                User.id.in_(
                    select(user_role_association.c.user_id)
                    .join(Role, Role.id == user_role_association.c.role_id)
                    .where(Role.name == role)
                )
            )
        if status:
            query = query.where(User.status == status)
        if department:
            query = query.where(User.department == department)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    User.name.ilike(pattern),
                    User.email.ilike(pattern),
                    User.phone_number.ilike(pattern),
                )
            )

        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
        result = await db.execute(query.order_by(User.created_at.desc()).offset(skip).limit(limit))
        return list(result.scalars().all()), total

    async def departments(self, db: AsyncSession) -> List[str]:
        """Distinct non-empty departments."""
        result = await db.execute(
            select(User.department)
            .where(User.department.isnot(None), User.department != "")
            .distinct()
            .order_by(User.department)
        )
        return [row for row in result.scalars().all()]


class CRUDRole(CRUDBase[Role, dict, dict]):
    """CRUD operations for Role."""

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[Role]:
        """Get role by name."""
        result = await db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def get_by_names(self, db: AsyncSession, *, names: Iterable[str]) -> List[Role]:
        names = list(names)
        if not names:
            return []
        result = await db.execute(select(Role).where(Role.name.in_(names)))
        return list(result.scalars().all())

    async def get_all(self, db: AsyncSession) -> List[Role]:
        result = await db.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())


class CRUDPermission(CRUDBase[Permission, dict, dict]):
    """CRUD operations for Permission."""

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[Permission]:
        result = await db.execute(select(Permission).where(Permission.name == name))
        return result.scalar_one_or_none()

    async def get_by_names(self, db: AsyncSession, *, names: Iterable[str]) -> List[Permission]:
        names = list(names)
        if not names:
            return []
        result = await db.execute(select(Permission).where(Permission.name.in_(names)))
        return list(result.scalars().all())

    async def get_all(self, db: AsyncSession) -> List[Permission]:
        result = await db.execute(select(Permission).order_by(Permission.name))
        return list(result.scalars().all())


user = CRUDUser(User)
role = CRUDRole(Role)
permission = CRUDPermission(Permission)
