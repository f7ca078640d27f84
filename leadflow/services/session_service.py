"""Promotes a verified login session to fully authenticated."""
import logging
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.orm import Session

from leadflow.models.enums import UserRole
from leadflow.repositories.session_repo import LoginSessionRepository
from leadflow.repositories.user_repo import UserRepository
from leadflow.services.messaging.errors import PromotionError

logger = logging.getLogger(__name__)


class UserIdentity(BaseModel):
    """Who completed the second factor, and which session it unlocked."""
    user_id: UUID
    email: str
    name: str
    role: UserRole
    session_id: UUID


class SessionPromoter:
    """Marks a user's pending login session as authenticated."""

    def __init__(self, db: Session):
        self.users = UserRepository(db)
        self.sessions = LoginSessionRepository(db)

    def promote(self, email: str) -> UserIdentity:
        """
        Finish the login for *email*.

        Only sessions opened by a 2FA password login qualify; a session a
        password login authenticated on its own is never unlocked by a code.
        Idempotent: the latest 2FA session, once promoted, is returned
        unchanged.

        Raises:
            PromotionError: no active user, or no 2FA login session to promote
        """
        user = self.users.get_by_email(email)
        if user is None or not user.is_active:
            logger.warning("2FA promotion for unknown or inactive account %s", email)
            raise PromotionError()

        session = self.sessions.latest_two_factor_for_user(user.id)
        if session is None:
            logger.warning("2FA promotion for %s without a 2FA login session", email)
            raise PromotionError()

        if session.is_pending_2fa:
            session = self.sessions.promote(session)
            logger.info("Login session %s promoted for %s", session.id, email)

        return UserIdentity(
            user_id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            session_id=session.id,
        )
