"""Notification schemas."""
from pydantic import EmailStr

from .base import CamelModel


class SampleNotificationRequest(CamelModel):
    """Send a sample lead notification; ``type`` is checked by the endpoint."""
    email: EmailStr
    type: str
