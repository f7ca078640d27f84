"""User model."""
from sqlalchemy import Column, String, Boolean, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid

from leadflow.db.base import Base
from .base import TimestampMixin
from .enums import UserRole


class User(Base, TimestampMixin):
    """Application user (admins, managers, sales users)."""

    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.user, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    two_factor_enabled = Column(Boolean, default=False, nullable=False)

    login_sessions = relationship('LoginSession', back_populates='user', cascade='all, delete-orphan')
    leads = relationship('Lead', back_populates='created_by')

    def __repr__(self) -> str:
        return f'<User(id={self.id}, email={self.email}, role={self.role})>'
