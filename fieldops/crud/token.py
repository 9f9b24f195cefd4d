"""Access token registry operations."""
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.crud.base import CRUDBase
from fieldops.models.token import AccessToken


class CRUDAccessToken(CRUDBase[AccessToken, dict, dict]):
    """CRUD operations for AccessToken."""

    async def get_by_jti(self, db: AsyncSession, *, jti: str) -> Optional[AccessToken]:
        result = await db.execute(select(AccessToken).where(AccessToken.jti == jti))
        return result.scalar_one_or_none()

    async def remove_for_user(self, db: AsyncSession, *, user_id: UUID) -> int:
        """Delete every token of a user and return how many were removed."""
        result = await db.execute(delete(AccessToken).where(AccessToken.user_id == user_id))
        await db.commit()
        return result.rowcount or 0


access_token = CRUDAccessToken(AccessToken)
