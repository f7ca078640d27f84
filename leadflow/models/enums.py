"""Enums for database models."""
import enum


class UserRole(str, enum.Enum):
    """User role types."""
    admin = "admin"
    manager = "manager"
    user = "user"


class LeadStatus(str, enum.Enum):
    """Lead pipeline status."""
    new = "new"
    followup = "followup"
    qualified = "qualified"
    hot = "hot"
    converted = "converted"
    lost = "lost"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    LeadStatus.new: "New Lead",
    LeadStatus.followup: "Follow-up",
    LeadStatus.qualified: "Qualified",
    LeadStatus.hot: "Hot Lead",
    LeadStatus.converted: "Converted to Customer",
    LeadStatus.lost: "Lost",
}


class CustomerCategory(str, enum.Enum):
    """Whether the lead is already a customer."""
    existing = "existing"
    potential = "potential"

    @property
    def label(self) -> str:
        return "Existing Customer" if self is CustomerCategory.existing else "Potential Customer"


class CommunicationChannel(str, enum.Enum):
    """Preferred communication channel."""
    email = "email"
    phone = "phone"
    whatsapp = "whatsapp"
    sms = "sms"
    in_person = "in-person"


class LeadSource(str, enum.Enum):
    """Where the lead came from."""
    website = "website"
    referral = "referral"
    linkedin = "linkedin"
    facebook = "facebook"
    twitter = "twitter"
    campaign = "campaign"
    other = "other"


class NotificationType(str, enum.Enum):
    """Lead notification email types."""
    new_lead = "new_lead"
    lead_update = "lead_update"
    lead_converted = "lead_converted"
