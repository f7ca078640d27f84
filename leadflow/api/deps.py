"""Dependencies for API endpoints."""
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from uuid import UUID

from leadflow.db.base import get_db
from leadflow.models.enums import UserRole
from leadflow.models.login_session import LoginSession
from leadflow.models.user import User
from leadflow.core.security import decode_token

security = HTTPBearer()


def _parse_uuid(value) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> LoginSession:
    """Resolve the bearer token to a fully authenticated login session."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        raise credentials_exception

    user_id = _parse_uuid(payload.get("sub"))
    session_id = _parse_uuid(payload.get("sid"))
    if user_id is None or session_id is None:
        raise credentials_exception

    session = db.get(LoginSession, session_id)
    if session is None or session.user_id != user_id:
        raise credentials_exception

    # pending 2FA logins and logged-out sessions cannot use the API
    if not session.is_authenticated():
        raise credentials_exception

    return session


async def get_current_user(
    session: LoginSession = Depends(get_current_session),
) -> User:
    """Get current authenticated user from JWT token."""
    user = session.user
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Verify user is an admin."""
    if current_user.role != UserRole.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def get_client_ip(request: Request) -> str:
    """Extract client IP address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_user_agent(request: Request) -> str:
    """Extract user agent."""
    return request.headers.get("User-Agent", "unknown")
