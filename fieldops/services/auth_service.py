"""Authentication service: credential checks and the token registry."""
import logging
import uuid
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.config import settings
from fieldops.core.exceptions import UnauthorizedError, ValidationError
from fieldops.core.security import RoleName
from fieldops.crud.token import access_token as token_crud
from fieldops.crud.user import role as role_crud, user as user_crud
from fieldops.models.token import AccessToken
from fieldops.models.user import User
from fieldops.schemas.auth import RegisterRequest
from fieldops.utils.security import create_access_token, decode_token, get_password_hash, verify_password
from fieldops.utils.time import as_naive_utc, utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "The provided credentials are incorrect."


class AuthService:
    """Authentication service."""

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """Authenticate a user by email and password."""
        user = await user_crud.get_by_email(db, email=email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        if not user.is_active:
            return None
        return user

    @staticmethod
    async def issue_token(db: AsyncSession, user: User, name: str = "auth_token") -> dict:
        """Sign a new access token and register its jti."""
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        jti = uuid.uuid4().hex
        token = create_access_token(
            data={"sub": str(user.id), "email": user.email, "jti": jti},
            expires_delta=expires_delta,
        )
        db.add(AccessToken(user_id=user.id, name=name, jti=jti, expires_at=utcnow() + expires_delta))
        await db.commit()
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    @staticmethod
    async def login(db: AsyncSession, email: str, password: str, device_name: Optional[str] = None) -> Tuple[User, dict]:
        """Check credentials, stamp ``last_login_at`` and issue a token.

        Wrong credentials and inactive accounts are reported as a validation
        error on ``email`` rather than a 401.
        """
        user = await AuthService.authenticate_user(db, email, password)
        if not user:
            logger.info("Failed login for %s", email)
            raise ValidationError({"email": [INVALID_CREDENTIALS]})

        user.last_login_at = utcnow()
        tokens = await AuthService.issue_token(db, user, name=device_name or "auth_token")
        logger.info("User %s logged in", user.id)
        return user, tokens

    @staticmethod
    async def register(db: AsyncSession, data: RegisterRequest) -> Tuple[User, dict]:
        """Create an employee account and log it in."""
        if await user_crud.get_by_email(db, email=data.email):
            raise ValidationError({"email": ["The email has already been taken."]})

        employee = await role_crud.get_by_name(db, name=RoleName.EMPLOYEE.value)
        new_user = User(
            name=data.name,
            email=data.email,
            password_hash=get_password_hash(data.password),
            phone_number=data.phone_number,
            department=data.department,
            position=data.position,
            address=data.address,
        )
        new_user.roles = [employee] if employee else []
        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)

        tokens = await AuthService.issue_token(db, new_user)
        logger.info("Registered user %s", new_user.id)
        return new_user, tokens

    @staticmethod
    async def resolve_token(db: AsyncSession, raw_token: str) -> Tuple[User, AccessToken]:
        """Map a bearer token to its user and registry row.

        The signature and expiry must verify, the jti must still be
        registered and the user must exist and be active.
        """
        credentials_exception = UnauthorizedError("Could not validate credentials")
        try:
            payload = decode_token(raw_token)
        except ValueError:
            raise credentials_exception

        if payload.get("type") != "access" or not payload.get("sub") or not payload.get("jti"):
            raise credentials_exception

        token_row = await token_crud.get_by_jti(db, jti=payload["jti"])
        if token_row is None or str(token_row.user_id) != payload["sub"]:
            raise credentials_exception
        if token_row.expires_at is not None and as_naive_utc(token_row.expires_at) < as_naive_utc(utcnow()):
            raise credentials_exception

        user = await user_crud.get(db, id=token_row.user_id)
        if user is None or not user.is_active:
            raise credentials_exception

        token_row.last_used_at = utcnow()
        await db.commit()
        return user, token_row

    @staticmethod
    async def revoke_token(db: AsyncSession, token_row: AccessToken) -> None:
        """Revoke exactly one token."""
        await db.delete(token_row)
        await db.commit()
        logger.info("Token %s of user %s revoked", token_row.jti, token_row.user_id)

    @staticmethod
    async def revoke_all_tokens(db: AsyncSession, user: User) -> int:
        """Revoke every token of ``user``."""
        removed = await token_crud.remove_for_user(db, user_id=user.id)
        logger.info("Revoked %d token(s) of user %s", removed, user.id)
        return removed

    @staticmethod
    async def refresh(db: AsyncSession, user: User, token_row: AccessToken) -> dict:
        """Swap the presented token for a new one."""
        name = token_row.name
        await db.delete(token_row)
        tokens = await AuthService.issue_token(db, user, name=name)
        logger.info("Token refreshed for user %s", user.id)
        return tokens

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return get_password_hash(password)
