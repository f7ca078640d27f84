"""User management schemas."""
from typing import Optional

from pydantic import Field, model_validator

from leadflow.models.enums import UserRole
from .base import CamelModel


class ProfileUpdateRequest(CamelModel):
    """Profile changes; blank values leave the field unchanged."""
    name: Optional[str] = Field(None, max_length=255)
    role: Optional[UserRole] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, max_length=128)
    confirm_password: Optional[str] = None

    @property
    def wants_password_change(self) -> bool:
        return bool(self.new_password and self.new_password.strip())

    @model_validator(mode='after')
    def check_password_change(self):
        if not self.wants_password_change:
            return self
        if not self.current_password or not self.current_password.strip():
            raise ValueError("Current password is required to change password")
        if len(self.new_password) < 6:
            raise ValueError("Password must be at least 6 characters")
        if self.new_password != self.confirm_password:
            raise ValueError("New passwords do not match")
        return self


class TwoFactorToggleRequest(CamelModel):
    enabled: bool


class MessageResponse(CamelModel):
    message: str
