"""
OTP Store
=========

Holds at most one pending two-factor code per email address.

Backends:
- ``InMemoryOTPStore``: process-local dict guarded by one asyncio lock per
  email. Expired records are dropped lazily and by ``purge_expired``.
- ``RedisOTPStore``: JSON records with a TTL, serialized through a Redis
  lock per email so several app workers can share pending codes.

Callers only ever receive copies of records; mutations go through ``put``
while holding ``lock(email)``.
"""

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, Optional

import redis.asyncio as aioredis
from pydantic import BaseModel, Field
from redis.exceptions import LockError, RedisError

logger = logging.getLogger(__name__)

RECORD_KEY_PREFIX = "otp:record"
LOCK_KEY_PREFIX = "otp:lock"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OTPRecord(BaseModel):
    """Pending verification state for one email."""

    email: str
    code: str
    expires_at: datetime
    remaining_attempts: int = Field(..., ge=0)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class OTPStoreError(Exception):
    """Raised when the store backend cannot be reached or locked."""


# ============================================================================
# Store Abstract Base
# ============================================================================

class OTPStore(ABC):
    """Mapping of normalized email -> OTPRecord."""

    @abstractmethod
    async def get(self, email: str) -> Optional[OTPRecord]:
        """Return a copy of the record for *email*, if any."""

    @abstractmethod
    async def put(self, record: OTPRecord) -> None:
        """Insert or replace the record for ``record.email``."""

    @abstractmethod
    async def delete(self, email: str) -> None:
        """Remove the record for *email* (no-op if absent)."""

    @abstractmethod
    def lock(self, email: str):
        """Async context manager serializing all operations on *email*."""

    @abstractmethod
    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Drop expired records; return how many were removed."""

    async def close(self) -> None:
        """Release backend resources."""


# ============================================================================
# In-memory backend
# ============================================================================

class InMemoryOTPStore(OTPStore):
    """Process-local store. Suitable for a single worker."""

    def __init__(self) -> None:
        self._records: Dict[str, OTPRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, email: str) -> Optional[OTPRecord]:
        record = self._records.get(email)
        return record.model_copy() if record else None

    async def put(self, record: OTPRecord) -> None:
        self._records[record.email] = record.model_copy()

    async def delete(self, email: str) -> None:
        self._records.pop(email, None)

    @asynccontextmanager
    async def lock(self, email: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(email, asyncio.Lock())
        async with lock:
            yield

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        expired = [email for email, rec in self._records.items() if rec.is_expired(now)]
        for email in expired:
            self._records.pop(email, None)

        # locks for emails with no pending record are only kept while held
        for email in [e for e, lk in self._locks.items() if e not in self._records and not lk.locked()]:
            self._locks.pop(email, None)

        if expired:
            logger.debug("Purged %d expired OTP records", len(expired))
        return len(expired)


# ============================================================================
# Redis backend
# ============================================================================

class RedisOTPStore(OTPStore):
    """Redis-backed store shared by all workers."""

    def __init__(
        self,
        redis_url: str,
        lock_timeout: int = 5,
        expiry_grace_seconds: int = 60,
        client: Optional[aioredis.Redis] = None,
    ):
        """
        Args:
            redis_url: Redis connection URL
            lock_timeout: seconds a per-email lock is held/awaited at most
            expiry_grace_seconds: extra TTL so a late verify still sees the
                record and reports it as expired instead of missing
            client: pre-built client (tests)
        """
        self.redis_url = redis_url
        self.lock_timeout = lock_timeout
        self.expiry_grace_seconds = expiry_grace_seconds
        self.redis = client or aioredis.from_url(redis_url, decode_responses=True)

    @staticmethod
    def _key(email: str) -> str:
        return f"{RECORD_KEY_PREFIX}:{email}"

    async def get(self, email: str) -> Optional[OTPRecord]:
        try:
            raw = await self.redis.get(self._key(email))
        except RedisError as exc:
            raise OTPStoreError(f"Redis GET failed: {exc}") from exc
        if raw is None:
            return None
        return OTPRecord.model_validate_json(raw)

    async def put(self, record: OTPRecord) -> None:
        remaining = (record.expires_at - utc_now()).total_seconds()
        ttl = max(1, math.ceil(remaining)) + self.expiry_grace_seconds
        try:
            await self.redis.set(self._key(record.email), record.model_dump_json(), ex=ttl)
        except RedisError as exc:
            raise OTPStoreError(f"Redis SET failed: {exc}") from exc

    async def delete(self, email: str) -> None:
        try:
            await self.redis.delete(self._key(email))
        except RedisError as exc:
            raise OTPStoreError(f"Redis DELETE failed: {exc}") from exc

    @asynccontextmanager
    async def lock(self, email: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{LOCK_KEY_PREFIX}:{email}",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            raise OTPStoreError(f"Redis lock failed: {exc}") from exc
        if not acquired:
            raise OTPStoreError(f"Timed out waiting for OTP lock on {email}")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("OTP lock for %s expired before release", email)

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        # Redis evicts records through their TTL.
        return 0

    async def close(self) -> None:
        await self.redis.aclose()


def build_otp_store(settings) -> OTPStore:
    """Create the store configured by ``OTP_STORE_BACKEND``."""
    if settings.OTP_STORE_BACKEND == "redis":
        if not settings.REDIS_URL:
            raise ValueError("OTP_STORE_BACKEND=redis requires REDIS_URL")
        logger.info("Using Redis OTP store")
        return RedisOTPStore(
            settings.REDIS_URL,
            lock_timeout=settings.OTP_LOCK_TIMEOUT_SECS,
            expiry_grace_seconds=settings.OTP_SWEEP_INTERVAL_SECS,
        )
    logger.info("Using in-memory OTP store")
    return InMemoryOTPStore()
