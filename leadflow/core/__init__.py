"""
Core package initializer.

This package provides core utilities such as token handling, password
hashing, OTP generation and OTP send rate limiting.
"""

from .security import (
    generate_otp,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    "generate_otp",
    "create_access_token",
    "decode_token",
    "hash_password",
    "verify_password",
]
