"""FastAPI dependencies for authentication and authorization."""
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import settings
from fieldops.core.exceptions import ForbiddenError, UnauthorizedError
from fieldops.core.security import Permission
from fieldops.database import get_db
from fieldops.models.token import AccessToken
from fieldops.models.user import User
from fieldops.services.auth_service import AuthService
from fieldops.utils.permissions import has_any_role, has_permission

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)


@dataclass
class CurrentToken:
    """The authenticated user together with the token they presented."""

    user: User
    token: AccessToken


async def get_current_token(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentToken:
    """Resolve the bearer token against the token registry."""
    if not token:
        raise UnauthorizedError()
    user, token_row = await AuthService.resolve_token(db, token)
    return CurrentToken(user=user, token=token_row)


async def get_current_user(current: CurrentToken = Depends(get_current_token)) -> User:
    """Get current authenticated user."""
    return current.user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get current active user."""
    if not current_user.is_active:
        raise UnauthorizedError("User is inactive")
    return current_user


def require_role(*role_names: str):
    """Dependency factory for requiring any of the given roles."""

    async def role_checker(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if not has_any_role(current_user, role_names):
            raise ForbiddenError(f"Role required: {' or '.join(role_names)}")
        return current_user

    return role_checker


def require_permission(permission: Permission):
    """Dependency factory for requiring a specific permission."""

    async def permission_checker(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if not has_permission(current_user, permission):
            raise ForbiddenError(f"Permission required: {permission.value}")
        return current_user

    return permission_checker
