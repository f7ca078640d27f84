"""Lead schemas."""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from leadflow.models.enums import CommunicationChannel, CustomerCategory, LeadSource, LeadStatus
from leadflow.utils.validators import InputValidationError, validate_phone_number, validate_pincode
from .base import CamelModel

OPTIONAL_FIELDS = (
    'date_of_birth',
    'company_name',
    'designation',
    'last_contacted_date',
    'last_contacted_by',
    'next_followup_date',
    'customer_interested_in',
    'preferred_communication_channel',
    'lead_source',
    'custom_lead_source',
    'additional_notes',
)

REQUIRED_FIELDS = (
    'name',
    'phone_number',
    'email',
    'city',
    'state',
    'country',
    'pincode',
    'customer_category',
    'lead_status',
)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        return validate_phone_number(value)
    except InputValidationError as exc:
        raise ValueError(str(exc)) from exc


def _check_pincode(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        return validate_pincode(value)
    except InputValidationError as exc:
        raise ValueError(str(exc)) from exc


class LeadCreate(CamelModel):
    """Schema for creating a lead."""
    name: str = Field(..., min_length=1, max_length=255, description="Lead name")
    phone_number: str = Field(..., min_length=1, max_length=32)
    email: EmailStr
    date_of_birth: Optional[date] = None

    city: str = Field(..., min_length=1, max_length=120)
    state: str = Field(..., min_length=1, max_length=120)
    country: str = Field(..., min_length=1, max_length=120)
    pincode: str

    company_name: Optional[str] = Field(None, max_length=255)
    designation: Optional[str] = Field(None, max_length=255)
    customer_category: CustomerCategory

    last_contacted_date: Optional[date] = None
    last_contacted_by: Optional[str] = Field(None, max_length=50)
    next_followup_date: Optional[date] = None
    customer_interested_in: Optional[str] = Field(None, max_length=100)
    preferred_communication_channel: Optional[CommunicationChannel] = None
    lead_source: Optional[LeadSource] = None
    custom_lead_source: Optional[str] = Field(None, max_length=50)
    lead_status: LeadStatus
    additional_notes: Optional[str] = Field(None, max_length=100)

    @field_validator(*OPTIONAL_FIELDS, mode='before')
    @classmethod
    def empty_strings_are_missing(cls, v):
        return _blank_to_none(v)

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator('pincode')
    @classmethod
    def validate_pin(cls, v: str) -> str:
        return _check_pincode(v)


class LeadUpdate(CamelModel):
    """Partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, min_length=1, max_length=32)
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None

    city: Optional[str] = Field(None, min_length=1, max_length=120)
    state: Optional[str] = Field(None, min_length=1, max_length=120)
    country: Optional[str] = Field(None, min_length=1, max_length=120)
    pincode: Optional[str] = None

    company_name: Optional[str] = Field(None, max_length=255)
    designation: Optional[str] = Field(None, max_length=255)
    customer_category: Optional[CustomerCategory] = None

    last_contacted_date: Optional[date] = None
    last_contacted_by: Optional[str] = Field(None, max_length=50)
    next_followup_date: Optional[date] = None
    customer_interested_in: Optional[str] = Field(None, max_length=100)
    preferred_communication_channel: Optional[CommunicationChannel] = None
    lead_source: Optional[LeadSource] = None
    custom_lead_source: Optional[str] = Field(None, max_length=50)
    lead_status: Optional[LeadStatus] = None
    additional_notes: Optional[str] = Field(None, max_length=100)

    @field_validator(*OPTIONAL_FIELDS, mode='before')
    @classmethod
    def empty_strings_are_missing(cls, v):
        return _blank_to_none(v)

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)

    @field_validator('pincode')
    @classmethod
    def validate_pin(cls, v: Optional[str]) -> Optional[str]:
        return _check_pincode(v)

    @model_validator(mode='after')
    def required_fields_not_cleared(self):
        cleared = [f for f in REQUIRED_FIELDS if f in self.model_fields_set and getattr(self, f) is None]
        if cleared:
            raise ValueError(f"Fields cannot be cleared: {', '.join(cleared)}")
        return self


class LeadResponse(CamelModel):
    """Lead as returned by the API."""
    id: UUID
    name: str
    phone_number: str
    email: str
    date_of_birth: Optional[date] = None
    city: str
    state: str
    country: str
    pincode: str
    company_name: Optional[str] = None
    designation: Optional[str] = None
    customer_category: CustomerCategory
    last_contacted_date: Optional[date] = None
    last_contacted_by: Optional[str] = None
    next_followup_date: Optional[date] = None
    customer_interested_in: Optional[str] = None
    preferred_communication_channel: Optional[CommunicationChannel] = None
    lead_source: Optional[LeadSource] = None
    custom_lead_source: Optional[str] = None
    lead_status: LeadStatus
    additional_notes: Optional[str] = None
    created_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class LeadStatsResponse(CamelModel):
    """Dashboard summary cards."""
    total_leads: int
    hot_leads: int
    converted: int
    conversion_rate: str  # one decimal, e.g. "33.3"


class AnalyticsResponse(CamelModel):
    total_leads: int
    converted_leads: int
    hot_leads: int
    conversion_rate: float
    time_range: int
