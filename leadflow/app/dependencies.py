# leadflow/app/dependencies.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from leadflow.db.base import get_db
from leadflow.services.messaging import NotificationService, OTPService
from leadflow.services.session_service import SessionPromoter


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notifier


def get_otp_service(request: Request) -> OTPService:
    return request.app.state.otp_service


def get_session_promoter(db: Session = Depends(get_db)) -> SessionPromoter:
    return SessionPromoter(db)
