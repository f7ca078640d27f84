# services/messaging/notification_service.py
import asyncio
import logging
from functools import partial
from html import escape
from typing import Iterable, Optional

import resend  # blocking SDK

from leadflow.app.config import settings

logger = logging.getLogger(__name__)

_FOOTER = """
  <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px;">
    <p>This is an automated notification from LeadFlow.</p>
  </div>
"""


class NotificationService:
    """Send email notifications through Resend.

    Without an API key, sends are simulated: the message is logged and
    reported as delivered so local development works offline.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: float = 1.0,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.from_email = from_email or settings.RESEND_FROM_EMAIL
        self.max_retries = max_retries or settings.EMAIL_MAX_RETRIES
        self.backoff_seconds = backoff_seconds

        if self.api_key:
            # configure SDK (global)
            resend.api_key = self.api_key
        else:
            logger.warning("RESEND_API_KEY not set; email notifications will be simulated.")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    async def _run_blocking(fn, *args, **kwargs):
        """Run a blocking function in the default threadpool so the event loop isn't blocked."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))

    def _send_email_blocking(self, to: str, subject: str, html: str, text: Optional[str]) -> dict:
        """Blocking call to the resend SDK. Returns SDK response dict or raises."""
        params = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if text:
            params["text"] = text
        return resend.Emails.send(params)

    async def send_email(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        """Send one email. Returns True on success, False on permanent failure."""
        if not self.is_configured:
            logger.info("📧 [SIMULATED EMAIL] To: %s | Subject: %s", to, subject)
            if text:
                logger.info("📧 [SIMULATED EMAIL] Content: %s", text)
            return True

        attempt = 0
        backoff = self.backoff_seconds
        while attempt < self.max_retries:
            attempt += 1
            try:
                resp = await self._run_blocking(self._send_email_blocking, to, subject, html, text)
                logger.info("📧 [EMAIL] Sent '%s' to %s (attempt %d) resp: %s", subject, to, attempt, resp)
                return True
            except Exception as exc:
                # the SDK raises its own error types as well as network errors
                logger.exception("📧 [EMAIL] Error sending '%s' to %s (attempt %d): %s", subject, to, attempt, exc)
                if attempt < self.max_retries:
                    await asyncio.sleep(backoff)
                    backoff *= 2

        logger.error("📧 [EMAIL] Failed to send '%s' to %s after %d attempts.", subject, to, attempt)
        return False

    # ------------------------------------------------------------------
    # Two-factor
    # ------------------------------------------------------------------

    async def send_otp_email(
        self,
        to: str,
        otp_code: str,
        expires_minutes: int,
        max_attempts: int,
        name: Optional[str] = None,
    ) -> bool:
        greeting = f"Hello {escape(name)}," if name else "Hello,"
        subject = "🔐 Two-Factor Authentication Code - LeadFlow"
        html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">🔐 Two-Factor Authentication</h2>
  <p>{greeting}</p>
  <p>Please use the following code to complete your login:</p>
  <div style="background: #f3f4f6; padding: 30px; border-radius: 12px; margin: 30px 0; text-align: center;">
    <h1 style="margin: 0; font-size: 48px; color: #2563eb; letter-spacing: 8px; font-family: 'Courier New', monospace;">{otp_code}</h1>
  </div>
  <ul>
    <li>This code will expire in {expires_minutes} minutes</li>
    <li>You have {max_attempts} attempts to enter the correct code</li>
    <li>Never share this code with anyone</li>
  </ul>
  {_FOOTER}
</div>
"""
        text = f"Your LeadFlow verification code is {otp_code}. It expires in {expires_minutes} minutes."
        return await self.send_email(to, subject, html, text)

    # ------------------------------------------------------------------
    # Lead notifications
    # ------------------------------------------------------------------

    @staticmethod
    def _lead_block(lead_name: str, lead_id: str, extra: str = "") -> str:
        return f"""
  <div style="background: #f3f4f6; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <h3 style="margin: 0 0 10px 0; color: #374151;">Lead Details:</h3>
    <p style="margin: 5px 0;"><strong>Name:</strong> {escape(lead_name)}</p>
    <p style="margin: 5px 0;"><strong>Lead ID:</strong> {escape(lead_id)}</p>
    {extra}
  </div>
"""

    async def notify_new_lead(self, to: str, lead_name: str, lead_id: str) -> bool:
        html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">New Lead Added</h2>
  <p>A new lead has been added to your LeadFlow system:</p>
  {self._lead_block(lead_name, lead_id)}
  <p>You can view and manage this lead in your LeadFlow dashboard.</p>
  {_FOOTER}
</div>
"""
        return await self.send_email(to, "New Lead Added - LeadFlow", html)

    async def notify_lead_update(self, to: str, lead_name: str, lead_id: str, changes: Iterable[str]) -> bool:
        items = "".join(f"<li>{escape(change)}</li>" for change in changes)
        extra = f'<p style="margin: 15px 0 10px 0;"><strong>Changes Made:</strong></p><ul>{items}</ul>'
        html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">Lead Updated</h2>
  <p>A lead has been updated in your LeadFlow system:</p>
  {self._lead_block(lead_name, lead_id, extra)}
  {_FOOTER}
</div>
"""
        return await self.send_email(to, "Lead Updated - LeadFlow", html)

    async def notify_lead_converted(self, to: str, lead_name: str, lead_id: str) -> bool:
        extra = '<p style="margin: 15px 0 0 0; color: #059669;"><strong>Status:</strong> Converted to Customer</p>'
        html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #059669;">🎉 Congratulations! Lead Converted</h2>
  <p>A lead has been successfully converted to a customer:</p>
  {self._lead_block(lead_name, lead_id, extra)}
  {_FOOTER}
</div>
"""
        return await self.send_email(to, "🎉 Lead Converted - LeadFlow", html)

    async def broadcast(self, recipients: Iterable[str], sender, *args) -> int:
        """Call ``sender(recipient, *args)`` for every recipient; return successes."""
        sent = 0
        for recipient in recipients:
            try:
                if await sender(recipient, *args):
                    sent += 1
            except Exception:
                logger.exception("📧 [EMAIL] Notification to %s failed", recipient)
        return sent
