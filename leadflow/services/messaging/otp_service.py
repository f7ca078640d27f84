"""OTP issuance and verification service."""
import asyncio
import hmac
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Set

from pydantic import BaseModel

from leadflow.core.security import generate_otp
from leadflow.utils.validators import InputValidationError, normalize_email, validate_otp_code
from .errors import AttemptsExhausted, Expired, InvalidInput, Mismatch, NotFound
from .notification_service import NotificationService
from .otp_store import OTPRecord, OTPStore, utc_now

logger = logging.getLogger(__name__)


class IssueResult(BaseModel):
    email: str
    expires_at: datetime


class OTPService:
    """Issue and verify two-factor codes against an injected store.

    ``clock`` returns the current timezone-aware UTC time; tests pass a
    controllable one to simulate expiry.
    """

    def __init__(
        self,
        store: OTPStore,
        notifier: NotificationService,
        *,
        code_length: int = 6,
        expire_minutes: int = 10,
        max_attempts: int = 5,
        dispatch_timeout: float = 5.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.notifier = notifier
        self.code_length = code_length
        self.expire_minutes = expire_minutes
        self.max_attempts = max_attempts
        self.dispatch_timeout = dispatch_timeout
        self.clock = clock
        self._pending_dispatches: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, store: OTPStore, notifier: NotificationService, settings) -> "OTPService":
        return cls(
            store,
            notifier,
            code_length=settings.OTP_LENGTH,
            expire_minutes=settings.OTP_EXPIRE_MINUTES,
            max_attempts=settings.OTP_MAX_ATTEMPTS,
            dispatch_timeout=settings.OTP_DISPATCH_TIMEOUT_SECS,
        )

    def _normalize(self, email: str) -> str:
        try:
            return normalize_email(email)
        except InputValidationError as exc:
            raise InvalidInput() from exc

    async def issue(
        self,
        email: str,
        name: Optional[str] = None,
        *,
        wait_for_dispatch: bool = True,
    ) -> IssueResult:
        """
        Create a fresh code for *email*, replacing any pending one, and send it.

        The dispatch outcome never fails issuance: the record is stored
        before the email goes out, and a send that errors or outlives
        ``dispatch_timeout`` is only logged. With ``wait_for_dispatch=False``
        the send is only scheduled, so the call takes the same time whether
        or not an email goes out.
        """
        email = self._normalize(email)
        code = generate_otp(self.code_length)
        expires_at = self.clock() + timedelta(minutes=self.expire_minutes)

        async with self.store.lock(email):
            await self.store.put(
                OTPRecord(
                    email=email,
                    code=code,
                    expires_at=expires_at,
                    remaining_attempts=self.max_attempts,
                )
            )
        logger.info("2FA code issued for %s (expires %s)", email, expires_at.isoformat())

        await self._dispatch(email, code, name, wait=wait_for_dispatch)
        return IssueResult(email=email, expires_at=expires_at)

    async def _dispatch(self, email: str, code: str, name: Optional[str], wait: bool = True) -> None:
        task = asyncio.ensure_future(
            self.notifier.send_otp_email(email, code, self.expire_minutes, self.max_attempts, name)
        )
        self._pending_dispatches.add(task)
        task.add_done_callback(self._dispatch_done)
        if not wait:
            return
        try:
            # shield: a send that outlives the timeout keeps running
            sent = await asyncio.wait_for(asyncio.shield(task), timeout=self.dispatch_timeout)
        except asyncio.TimeoutError:
            logger.warning("2FA email to %s still pending after %.1fs; continuing", email, self.dispatch_timeout)
            return
        except Exception:
            logger.exception("2FA email dispatch to %s failed", email)
            return

        if not sent:
            logger.error("2FA email to %s was not delivered", email)

    def _dispatch_done(self, task: asyncio.Task) -> None:
        self._pending_dispatches.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("2FA email dispatch raised: %r", task.exception())

    async def verify(self, email: str, submitted_code: str) -> str:
        """
        Check *submitted_code* for *email*; return the normalized email.

        Raises:
            InvalidInput: malformed email or code
            NotFound: no pending code
            Expired: code past its expiry (record dropped)
            AttemptsExhausted: the last attempt was spent on a wrong code,
                or no attempts were left (record dropped either way)
            Mismatch: wrong code, attempts remain
        """
        email = self._normalize(email)
        try:
            validate_otp_code(submitted_code, self.code_length)
        except InputValidationError as exc:
            raise InvalidInput() from exc

        async with self.store.lock(email):
            record = await self.store.get(email)
            if record is None:
                raise NotFound()

            if record.is_expired(self.clock()):
                await self.store.delete(email)
                logger.info("2FA code for %s expired", email)
                raise Expired()

            if record.remaining_attempts <= 0:
                await self.store.delete(email)
                raise AttemptsExhausted()

            if not hmac.compare_digest(record.code.encode(), submitted_code.encode()):
                record.remaining_attempts -= 1
                logger.info("2FA mismatch for %s (%d attempts left)", email, record.remaining_attempts)
                if record.remaining_attempts == 0:
                    await self.store.delete(email)
                    raise AttemptsExhausted()
                await self.store.put(record)
                raise Mismatch(record.remaining_attempts)

            await self.store.delete(email)

        logger.info("2FA verification successful for %s", email)
        return email

    async def cancel(self, email: str) -> None:
        """Drop any pending code (logout, 2FA disabled)."""
        email = self._normalize(email)
        async with self.store.lock(email):
            await self.store.delete(email)

    async def sweep(self) -> int:
        return await self.store.purge_expired(self.clock())

    async def drain(self) -> None:
        """Wait for in-flight email dispatches (shutdown)."""
        if self._pending_dispatches:
            await asyncio.gather(*self._pending_dispatches, return_exceptions=True)
