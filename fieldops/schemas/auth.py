"""Authentication schemas."""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, root_validator

from fieldops.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str
    device_name: Optional[str] = Field(None, max_length=100)


class RegisterRequest(BaseModel):
    """Self-registration schema."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    password_confirmation: str
    phone_number: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None

    @root_validator(skip_on_failure=True)
    def passwords_match(cls, values):
        if values.get("password") != values.get("password_confirmation"):
            raise ValueError("Password confirmation does not match")
        return values


class TokenResponse(BaseModel):
    """Issued token with the user it belongs to."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
