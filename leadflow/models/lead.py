"""Lead model."""
from sqlalchemy import Column, String, Text, Date, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid

from leadflow.db.base import Base
from .base import TimestampMixin
from .enums import LeadStatus, CustomerCategory, CommunicationChannel, LeadSource


def _enum(enum_cls):
    # store the enum values ("in-person"), not the member names
    return SQLEnum(enum_cls, values_callable=lambda members: [m.value for m in members])


class Lead(Base, TimestampMixin):
    """A sales lead and its follow-up state."""

    __tablename__ = 'leads'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(32), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=True)

    city = Column(String(120), nullable=False, index=True)
    state = Column(String(120), nullable=False)
    country = Column(String(120), nullable=False)
    pincode = Column(String(6), nullable=False)

    company_name = Column(String(255), nullable=True)
    designation = Column(String(255), nullable=True)
    customer_category = Column(_enum(CustomerCategory), nullable=False, index=True)

    last_contacted_date = Column(Date, nullable=True, index=True)
    last_contacted_by = Column(String(50), nullable=True)
    next_followup_date = Column(Date, nullable=True)
    customer_interested_in = Column(String(100), nullable=True)
    preferred_communication_channel = Column(_enum(CommunicationChannel), nullable=True)
    lead_source = Column(_enum(LeadSource), nullable=True)
    custom_lead_source = Column(String(50), nullable=True)
    lead_status = Column(_enum(LeadStatus), default=LeadStatus.new, nullable=False, index=True)
    additional_notes = Column(Text, nullable=True)

    created_by_id = Column(Uuid, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    created_by = relationship('User', back_populates='leads')

    def __repr__(self) -> str:
        return f'<Lead(id={self.id}, name={self.name}, status={self.lead_status})>'
