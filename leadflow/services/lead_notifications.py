"""Emails sent to active users when leads are created or change."""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from leadflow.models.enums import LeadStatus
from leadflow.models.lead import Lead
from leadflow.services.messaging.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeadSnapshot:
    """The fields whose changes are reported."""
    id: str
    name: str
    lead_status: LeadStatus
    next_followup_date: Optional[date]
    last_contacted_by: Optional[str]

    @classmethod
    def of(cls, lead: Lead) -> "LeadSnapshot":
        return cls(
            id=str(lead.id),
            name=lead.name,
            lead_status=lead.lead_status,
            next_followup_date=lead.next_followup_date,
            last_contacted_by=lead.last_contacted_by,
        )


def describe_changes(before: LeadSnapshot, after: LeadSnapshot) -> List[str]:
    changes = []
    if before.lead_status != after.lead_status:
        changes.append(f"Status changed from {before.lead_status.value} to {after.lead_status.value}")
    if before.next_followup_date != after.next_followup_date:
        followup = after.next_followup_date.isoformat() if after.next_followup_date else "Not set"
        changes.append(f"Next follow-up date updated to {followup}")
    if before.last_contacted_by != after.last_contacted_by:
        changes.append(f"Last contacted by updated to {after.last_contacted_by or 'Not set'}")
    return changes


async def notify_lead_created(notifier: NotificationService, recipients: Sequence[str], lead: LeadSnapshot) -> int:
    sent = await notifier.broadcast(recipients, notifier.notify_new_lead, lead.name, lead.id)
    logger.info("New lead %s announced to %d/%d users", lead.id, sent, len(recipients))
    return sent


async def notify_lead_changed(
    notifier: NotificationService,
    recipients: Sequence[str],
    before: LeadSnapshot,
    after: LeadSnapshot,
) -> int:
    """A conversion gets its own email; other tracked changes get an update email."""
    if before.lead_status != after.lead_status and after.lead_status == LeadStatus.converted:
        return await notifier.broadcast(recipients, notifier.notify_lead_converted, after.name, after.id)

    changes = describe_changes(before, after)
    if not changes:
        return 0
    return await notifier.broadcast(recipients, notifier.notify_lead_update, after.name, after.id, changes)
