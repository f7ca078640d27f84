"""Authentication endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from datetime import timedelta
import logging

from leadflow.db.base import get_db
from leadflow.models.user import User
from leadflow.models.login_session import LoginSession
from leadflow.repositories.session_repo import LoginSessionRepository
from leadflow.repositories.user_repo import UserRepository
from leadflow.schemas.auth import (
    SendOTPRequest,
    SendOTPResponse,
    VerifyOTPRequest,
    VerifyOTPResponse,
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    UserResponse,
)
from leadflow.schemas.user import MessageResponse
from leadflow.services.messaging import OTPService
from leadflow.services.messaging.otp_store import utc_now
from leadflow.services.session_service import SessionPromoter
from leadflow.core.rate_limiter import can_send_otp, clear_send_counter
from leadflow.core.security import create_access_token, needs_rehash
from leadflow.app.dependencies import get_otp_service, get_session_promoter
from leadflow.api.deps import get_current_session, get_current_user, get_client_ip, get_user_agent

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_token(user_id, session_id, role) -> str:
    return create_access_token(data={"sub": str(user_id), "sid": str(session_id), "role": role.value})


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    db: Session = Depends(get_db)
):
    """Create a user account."""
    users = UserRepository(db)
    if users.get_by_email(request.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists"
        )

    user = users.create_user(
        email=request.email,
        password=request.password,
        name=request.name,
        role=request.role,
    )
    logger.info(f"New user signed up: {user.email} ({user.role.value})")
    return SignupResponse(user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
async def login(
    request: LoginRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Check credentials and open a login session.

    - 2FA users get a pending session and a code by email
    - Everyone else gets an access token right away
    """
    users = UserRepository(db)
    sessions = LoginSessionRepository(db)

    user = users.authenticate(request.email, request.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials. Please check your email and password and try again."
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive"
        )

    if needs_rehash(user.hashed_password):
        users.set_password(user.id, request.password)

    ip_address = get_client_ip(http_request)
    user_agent = get_user_agent(http_request)

    if user.two_factor_enabled:
        sessions.revoke_pending_for_user(user.id)
        sessions.open_session(user.id, pending_2fa=True, ip_address=ip_address, user_agent=user_agent)
        result = await otp_service.issue(user.email, user.name)
        logger.info(f"Login for {user.email} awaiting second factor")
        return LoginResponse(
            message="Verification code sent to your email.",
            requires_two_factor=True,
            email=result.email,
            expires_at=result.expires_at,
        )

    session = sessions.open_session(user.id, pending_2fa=False, ip_address=ip_address, user_agent=user_agent)
    logger.info(f"User {user.email} logged in")
    return LoginResponse(
        message="Login successful",
        requires_two_factor=False,
        user=UserResponse.model_validate(user),
        access_token=_issue_token(user.id, session.id, user.role),
        token_type="bearer",
    )


@router.post("/2fa/send-otp", response_model=SendOTPResponse)
async def send_otp(
    request: SendOTPRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Send a (new) two-factor code.

    Codes are only stored and sent for an active 2FA user whose password
    login is still waiting for its second factor. The response does not
    reveal which case applied, and the email is sent in the background so
    timing does not either.
    """
    email = str(request.email).strip().lower()

    allowed, retry_after = await can_send_otp(email)
    if not allowed:
        logger.warning(f"2FA code send limit reached for {email}")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": "Too many verification codes requested. Please try again later."},
            headers={"Retry-After": str(retry_after)},
        )

    user = UserRepository(db).get_by_email(email)
    pending = None
    if user is not None and user.is_active and user.two_factor_enabled:
        pending = LoginSessionRepository(db).latest_pending_for_user(user.id)

    if pending is None:
        logger.info(f"2FA code requested for {email} without a pending 2FA login")
        expires_at = utc_now() + timedelta(minutes=otp_service.expire_minutes)
        return SendOTPResponse(expires_at=expires_at)

    result = await otp_service.issue(user.email, user.name, wait_for_dispatch=False)
    return SendOTPResponse(expires_at=result.expires_at)


@router.post("/2fa/verify-otp", response_model=VerifyOTPResponse)
async def verify_otp(
    request: VerifyOTPRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    promoter: SessionPromoter = Depends(get_session_promoter),
):
    """
    Verify a two-factor code and finish the login.

    Failures are rendered by the VerifyError handler.
    """
    email = await otp_service.verify(request.email, request.otp)
    identity = promoter.promote(email)
    await clear_send_counter(email)

    user = UserRepository(db).get(identity.user_id)
    return VerifyOTPResponse(
        user=UserResponse.model_validate(user),
        access_token=_issue_token(identity.user_id, identity.session_id, identity.role),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: LoginSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """Revoke the current login session."""
    LoginSessionRepository(db).revoke(session.id)
    await otp_service.cancel(session.user.email)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)
