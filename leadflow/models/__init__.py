"""Import all models for Alembic."""
from .base import TimestampMixin
from .enums import (
    UserRole,
    LeadStatus,
    CustomerCategory,
    CommunicationChannel,
    LeadSource,
    NotificationType,
)
from .user import User
from .login_session import LoginSession
from .lead import Lead

__all__ = [
    "TimestampMixin",
    "UserRole",
    "LeadStatus",
    "CustomerCategory",
    "CommunicationChannel",
    "LeadSource",
    "NotificationType",
    "User",
    "LoginSession",
    "Lead",
]
