"""Login session model."""
from datetime import datetime
import uuid

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from leadflow.db.base import Base
from .base import TimestampMixin


class LoginSession(Base, TimestampMixin):
    """A login; stays pending until the second factor is verified."""

    __tablename__ = "login_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_pending_2fa = Column(Boolean, default=False, nullable=False)
    # opened by a password login that requires a second factor
    two_factor_login = Column(Boolean, default=False, nullable=False)
    authenticated_at = Column(DateTime, nullable=True)
    revoked_at = Column(DateTime, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)

    user = relationship("User", back_populates="login_sessions")

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_authenticated(self) -> bool:
        return not self.is_pending_2fa and not self.is_revoked

    def mark_authenticated(self) -> None:
        self.is_pending_2fa = False
        self.authenticated_at = datetime.utcnow()
