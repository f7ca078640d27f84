# leadflow/utils/validators.py

import re

from email_validator import EmailNotValidError, validate_email

# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

OTP_CODE_PATTERN = re.compile(r"[0-9]{6}")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
PINCODE_PATTERN = re.compile(r"^\d{5,6}$")


# ---------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------

class InputValidationError(ValueError):
    """Raised when an email, code or field fails shape validation."""


# ---------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------

def normalize_email(email: str) -> str:
    """
    Validate an email address and return its lookup form.

    The syntax check does not touch DNS. The result is stripped and
    lower-cased so it can key the OTP store and the user directory.

    Raises:
        InputValidationError
    """
    if not isinstance(email, str) or not email.strip():
        raise InputValidationError("Email is required")

    try:
        validated = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise InputValidationError(f"Invalid email address: {exc}") from exc

    return validated.normalized.lower()


def validate_otp_code(code: str, length: int = 6) -> str:
    """Return *code* if it is exactly *length* ASCII digits."""
    if not isinstance(code, str):
        raise InputValidationError("Code must be a string")

    pattern = OTP_CODE_PATTERN if length == 6 else re.compile(rf"[0-9]{{{length}}}")
    if not pattern.fullmatch(code):
        raise InputValidationError(f"Code must be exactly {length} digits")
    return code


def validate_phone_number(value: str) -> str:
    if not PHONE_PATTERN.match(value):
        raise InputValidationError("Invalid phone number format")
    return value


def validate_pincode(value: str) -> str:
    if not PINCODE_PATTERN.match(value):
        raise InputValidationError("Invalid pincode format")
    return value
