# core/rate_limiter.py
import logging
from typing import Optional, Tuple

import redis.asyncio as redis

from leadflow.app.config import settings

logger = logging.getLogger(__name__)

try:
    r = redis.from_url(settings.REDIS_URL, decode_responses=True) if settings.REDIS_URL else None
except ValueError:
    logger.warning("Invalid REDIS_URL; OTP send rate limiting disabled")
    r = None


def _send_key(identifier: str) -> str:
    return f"otp:send:{identifier}"


async def can_send_otp(identifier: str) -> Tuple[bool, Optional[int]]:
    """
    Check whether we can send an OTP to `identifier` (normalized email).
    Returns (allowed, retry_after_seconds_or_None).
    """
    if r is None:
        return True, None

    key = _send_key(identifier)
    # increment counter atomically
    current = await r.incr(key)
    if current == 1:
        # first increment, set expiry for the window
        await r.expire(key, settings.OTP_SEND_WINDOW_SECS)

    if current > settings.OTP_SEND_LIMIT:
        ttl = await r.ttl(key)
        return False, ttl if ttl and ttl > 0 else settings.OTP_SEND_WINDOW_SECS
    return True, None


async def clear_send_counter(identifier: str) -> None:
    """Reset the send window once a code has been verified."""
    if r is None:
        return
    await r.delete(_send_key(identifier))
