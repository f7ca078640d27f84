"""Authentication schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from leadflow.models.enums import UserRole
from .base import CamelModel


class UserResponse(CamelModel):
    """User profile response (never includes the password hash)."""
    id: UUID
    name: str
    email: str
    role: UserRole
    is_active: bool
    two_factor_enabled: bool
    created_at: datetime


class SendOTPRequest(CamelModel):
    """Request a (new) two-factor code."""
    email: EmailStr


class SendOTPResponse(CamelModel):
    """Response after issuing a code; identical for unknown emails."""
    message: str = "If the account exists, a verification code has been sent."
    expires_at: datetime


class VerifyOTPRequest(CamelModel):
    """Submit a two-factor code.

    Shape checks happen in the verifier so malformed codes get the same
    error body as other verification failures.
    """
    email: str = Field(..., max_length=255)
    otp: str = Field(..., max_length=32)


class VerifyOTPResponse(CamelModel):
    """Successful two-factor verification."""
    message: str = "Two-factor authentication verified successfully."
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class SignupRequest(CamelModel):
    """User signup request."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.user

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v


class SignupResponse(CamelModel):
    message: str = "User created successfully"
    user: UserResponse


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(CamelModel):
    """Login result: either tokens, or a pending second factor."""
    message: str
    requires_two_factor: bool
    email: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: Optional[UserResponse] = None
    access_token: Optional[str] = None
    token_type: Optional[str] = None
