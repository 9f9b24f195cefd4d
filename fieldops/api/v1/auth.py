"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.database import get_db
from fieldops.dependencies import CurrentToken, get_current_active_user, get_current_token
from fieldops.models.user import User
from fieldops.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from fieldops.schemas.common import MessageResponse
from fieldops.schemas.user import UserResponse
from fieldops.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register an employee account and return its first token."""
    new_user, tokens = await AuthService.register(db, payload)
    return TokenResponse(**tokens, user=UserResponse.from_user(new_user))


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange email and password for a bearer token."""
    user, tokens = await AuthService.login(db, payload.email, payload.password, payload.device_name)
    return TokenResponse(**tokens, user=UserResponse.from_user(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current: CurrentToken = Depends(get_current_token),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the token used for this request."""
    await AuthService.revoke_token(db, current.token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all(
    current: CurrentToken = Depends(get_current_token),
    db: AsyncSession = Depends(get_db),
):
    """Revoke every token of the current user."""
    await AuthService.revoke_all_tokens(db, current.user)
    return MessageResponse(message="Logged out from all devices successfully")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
):
    """Get current authenticated user information."""
    return UserResponse.from_user(current_user)


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    current: CurrentToken = Depends(get_current_token),
    db: AsyncSession = Depends(get_db),
):
    """Replace the presented token with a new one."""
    tokens = await AuthService.refresh(db, current.user, current.token)
    return TokenResponse(**tokens, user=UserResponse.from_user(current.user))
