"""Two-factor verification errors.

Each error carries the HTTP status and the client-safe message it is
rendered with. ``NotFound``, ``Expired`` and ``PromotionError`` share one
message so a client cannot tell whether a code was ever issued.
"""
from typing import Optional

GENERIC_INVALID_MESSAGE = "Invalid or expired code. Please request a new one."


class VerifyError(Exception):
    """Base class for OTP issuance and verification failures."""

    kind = "verify_error"
    status_code = 400
    default_message = "Verification failed."

    def __init__(self, message: Optional[str] = None, remaining_attempts: Optional[int] = None):
        self.message = message or self.default_message
        self.remaining_attempts = remaining_attempts
        super().__init__(self.message)

    def to_response(self) -> dict:
        body = {"error": self.message}
        if self.remaining_attempts:
            body["remainingAttempts"] = self.remaining_attempts
        return body


class InvalidInput(VerifyError):
    kind = "invalid_input"
    status_code = 422
    default_message = "Please provide a valid email address and a 6-digit code."


class NotFound(VerifyError):
    kind = "not_found"
    status_code = 401
    default_message = GENERIC_INVALID_MESSAGE


class Expired(VerifyError):
    kind = "expired"
    status_code = 401
    default_message = GENERIC_INVALID_MESSAGE


class AttemptsExhausted(VerifyError):
    kind = "attempts_exhausted"
    status_code = 429
    default_message = "Maximum attempts exceeded. Please request a new code."


class Mismatch(VerifyError):
    kind = "mismatch"
    status_code = 401

    def __init__(self, remaining_attempts: int):
        super().__init__(
            f"Invalid code. {remaining_attempts} attempts remaining.",
            remaining_attempts=remaining_attempts,
        )


class PromotionError(VerifyError):
    """The verified email has no user or no login session to promote."""

    kind = "promotion_failed"
    status_code = 401
    default_message = GENERIC_INVALID_MESSAGE
