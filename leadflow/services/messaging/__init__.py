"""
Messaging package initializer.

Provides the email notification service and the two-factor OTP
store/issuer/verifier used by the application.
"""

from .errors import (
    VerifyError,
    InvalidInput,
    NotFound,
    Expired,
    AttemptsExhausted,
    Mismatch,
    PromotionError,
)
from .notification_service import NotificationService
from .otp_service import OTPService, IssueResult
from .otp_store import OTPRecord, OTPStore, InMemoryOTPStore, RedisOTPStore, build_otp_store

__all__ = [
    "VerifyError",
    "InvalidInput",
    "NotFound",
    "Expired",
    "AttemptsExhausted",
    "Mismatch",
    "PromotionError",
    "NotificationService",
    "OTPService",
    "IssueResult",
    "OTPRecord",
    "OTPStore",
    "InMemoryOTPStore",
    "RedisOTPStore",
    "build_otp_store",
]
