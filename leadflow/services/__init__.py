"""
Services package initializer.

Re-exports important service classes so callers can import from
`leadflow.services` instead of deep module paths.
"""

# Re-export messaging subpackage services for convenience
from .messaging import NotificationService, OTPService, build_otp_store
from .session_service import SessionPromoter, UserIdentity

__all__ = [
    "NotificationService",
    "OTPService",
    "build_otp_store",
    "SessionPromoter",
    "UserIdentity",
]
