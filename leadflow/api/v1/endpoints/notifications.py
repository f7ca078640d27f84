"""Notification endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from leadflow.models.enums import NotificationType
from leadflow.models.user import User
from leadflow.schemas.notification import SampleNotificationRequest
from leadflow.schemas.user import MessageResponse
from leadflow.services.messaging import NotificationService
from leadflow.app.dependencies import get_notification_service
from leadflow.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

SAMPLE_LEAD_NAME = "Test Lead"
SAMPLE_LEAD_ID = "test-123"


@router.post("/test", response_model=MessageResponse)
async def send_test_notification(
    request: SampleNotificationRequest,
    current_user: User = Depends(get_current_user),
    notifier: NotificationService = Depends(get_notification_service),
):
    """Send a sample lead notification to check email delivery."""
    try:
        kind = NotificationType(request.type)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid notification type"
        )

    to = str(request.email)
    if kind == NotificationType.new_lead:
        sent = await notifier.notify_new_lead(to, SAMPLE_LEAD_NAME, SAMPLE_LEAD_ID)
    elif kind == NotificationType.lead_update:
        sent = await notifier.notify_lead_update(to, SAMPLE_LEAD_NAME, SAMPLE_LEAD_ID, ["Status changed for testing"])
    else:
        sent = await notifier.notify_lead_converted(to, SAMPLE_LEAD_NAME, SAMPLE_LEAD_ID)

    if not sent:
        logger.error(f"Test notification ({kind.value}) to {to} failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send test notification"
        )
    return MessageResponse(message="Test notification sent successfully")
