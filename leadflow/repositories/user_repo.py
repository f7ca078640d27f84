"""User repository (the user directory)."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from leadflow.core.security import hash_password, verify_password
from leadflow.models.enums import UserRole
from leadflow.models.user import User
from leadflow.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for user database operations."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email (case-insensitive)."""
        return self.get_by_field('email', email.strip().lower())

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.asc()).all()

    def active_users(self) -> List[User]:
        return self.db.query(User).filter(User.is_active.is_(True)).all()

    def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole = UserRole.user,
        two_factor_enabled: bool = False,
    ) -> User:
        return self.create({
            'email': email.strip().lower(),
            'hashed_password': hash_password(password),
            'name': name,
            'role': role,
            'two_factor_enabled': two_factor_enabled,
        })

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when *password* matches, else None."""
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

    def set_password(self, user_id: UUID, new_password: str) -> Optional[User]:
        return self.update(user_id, {'hashed_password': hash_password(new_password)})
