"""Request and response schemas."""
from .base import CamelModel
from .auth import (
    SendOTPRequest,
    SendOTPResponse,
    VerifyOTPRequest,
    VerifyOTPResponse,
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    UserResponse,
)
from .lead import LeadCreate, LeadUpdate, LeadResponse, LeadStatsResponse, AnalyticsResponse
from .user import ProfileUpdateRequest, TwoFactorToggleRequest, MessageResponse
from .notification import SampleNotificationRequest

__all__ = [
    "CamelModel",
    "SendOTPRequest",
    "SendOTPResponse",
    "VerifyOTPRequest",
    "VerifyOTPResponse",
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "LoginResponse",
    "UserResponse",
    "LeadCreate",
    "LeadUpdate",
    "LeadResponse",
    "LeadStatsResponse",
    "AnalyticsResponse",
    "ProfileUpdateRequest",
    "TwoFactorToggleRequest",
    "MessageResponse",
    "SampleNotificationRequest",
]
