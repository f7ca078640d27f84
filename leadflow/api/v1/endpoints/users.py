"""User management endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from leadflow.db.base import get_db
from leadflow.models.enums import UserRole
from leadflow.models.user import User
from leadflow.repositories.user_repo import UserRepository
from leadflow.schemas.auth import UserResponse
from leadflow.schemas.user import ProfileUpdateRequest, TwoFactorToggleRequest
from leadflow.services.messaging import OTPService
from leadflow.core.security import hash_password, verify_password
from leadflow.app.dependencies import get_otp_service
from leadflow.api.deps import get_current_user, get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """List all users (admin only)."""
    return [UserResponse.model_validate(u) for u in UserRepository(db).list_users()]


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    request: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update name, role (admins only) and password of the current user."""
    changes = {}

    if request.name is not None and request.name.strip():
        changes['name'] = request.name.strip()

    if request.role is not None and request.role != current_user.role:
        if current_user.role != UserRole.admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admins can change roles"
            )
        changes['role'] = request.role

    if request.wants_password_change:
        if not verify_password(request.current_password, current_user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect"
            )
        changes['hashed_password'] = hash_password(request.new_password)

    if not changes:
        return UserResponse.model_validate(current_user)

    user = UserRepository(db).update(current_user.id, changes)
    logger.info(f"Profile updated for {user.email}: {', '.join(sorted(changes))}")
    return UserResponse.model_validate(user)


@router.put("/me/two-factor", response_model=UserResponse)
async def toggle_two_factor(
    request: TwoFactorToggleRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """Enable or disable email two-factor authentication."""
    user = UserRepository(db).update(current_user.id, {'two_factor_enabled': request.enabled})
    if not request.enabled:
        await otp_service.cancel(user.email)
    logger.info(f"Two-factor {'enabled' if request.enabled else 'disabled'} for {user.email}")
    return UserResponse.model_validate(user)
