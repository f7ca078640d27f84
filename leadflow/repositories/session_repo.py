"""Login session repository."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from leadflow.models.login_session import LoginSession
from leadflow.repositories.base import BaseRepository


class LoginSessionRepository(BaseRepository[LoginSession]):
    """Repository for login sessions."""

    def __init__(self, db: Session):
        super().__init__(LoginSession, db)

    def open_session(
        self,
        user_id: UUID,
        pending_2fa: bool,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LoginSession:
        """Start a login; fully authenticated unless a second factor is pending."""
        return self.create({
            'user_id': user_id,
            'is_pending_2fa': pending_2fa,
            'two_factor_login': pending_2fa,
            'authenticated_at': None if pending_2fa else datetime.utcnow(),
            'ip_address': ip_address,
            'user_agent': user_agent,
        })

    def latest_two_factor_for_user(self, user_id: UUID) -> Optional[LoginSession]:
        """Most recent non-revoked 2FA login of *user_id*; password-only logins are skipped."""
        return (
            self.db.query(LoginSession)
            .filter(
                LoginSession.user_id == user_id,
                LoginSession.two_factor_login.is_(True),
                LoginSession.revoked_at.is_(None),
            )
            .order_by(desc(LoginSession.created_at))
            .first()
        )

    def latest_pending_for_user(self, user_id: UUID) -> Optional[LoginSession]:
        """Most recent login of *user_id* still waiting for its second factor."""
        return (
            self.db.query(LoginSession)
            .filter(
                LoginSession.user_id == user_id,
                LoginSession.is_pending_2fa.is_(True),
                LoginSession.revoked_at.is_(None),
            )
            .order_by(desc(LoginSession.created_at))
            .first()
        )

    def promote(self, session: LoginSession) -> LoginSession:
        session.mark_authenticated()
        self.db.commit()
        self.db.refresh(session)
        return session

    def revoke(self, session_id: UUID) -> bool:
        session = self.get(session_id)
        if not session or session.is_revoked:
            return False
        session.revoked_at = datetime.utcnow()
        self.db.commit()
        return True

    def revoke_pending_for_user(self, user_id: UUID) -> int:
        """Revoke earlier pending logins so only the newest can be promoted."""
        count = (
            self.db.query(LoginSession)
            .filter(
                LoginSession.user_id == user_id,
                LoginSession.is_pending_2fa.is_(True),
                LoginSession.revoked_at.is_(None),
            )
            .update({'revoked_at': datetime.utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return count
