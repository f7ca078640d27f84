from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from leadflow.models import (
    CommunicationChannel,
    CustomerCategory,
    Lead,
    LeadStatus,
    LoginSession,
    User,
    UserRole,
)


def make_user(**overrides):
    data = dict(
        name="Test User",
        email="test@example.com",
        hashed_password="hashed_password",
        role=UserRole.user,
    )
    data.update(overrides)
    return User(**data)


def test_create_user(db_session):
    """Test user creation."""
    user = make_user()
    db_session.add(user)
    db_session.commit()

    assert user.id is not None
    assert user.email == "test@example.com"
    assert user.role == UserRole.user
    assert user.is_active is True
    assert user.two_factor_enabled is False
    assert user.created_at is not None


def test_user_email_is_unique(db_session):
    db_session.add(make_user())
    db_session.commit()

    db_session.add(make_user(name="Other"))
    with pytest.raises(IntegrityError):
        db_session.commit()


def test_login_session_lifecycle(db_session):
    user = make_user()
    db_session.add(user)
    db_session.commit()

    session = LoginSession(user_id=user.id, is_pending_2fa=True)
    db_session.add(session)
    db_session.commit()

    assert not session.is_authenticated()
    assert session.authenticated_at is None

    session.mark_authenticated()
    db_session.commit()

    assert session.is_authenticated()
    assert session.authenticated_at is not None
    assert user.login_sessions == [session]


def test_create_lead_stores_enum_values(db_session):
    """Test lead creation."""
    user = make_user()
    db_session.add(user)
    db_session.commit()

    lead = Lead(
        name="Jane Roe",
        phone_number="+1 555 0100",
        email="jane@example.com",
        city="Pune",
        state="Maharashtra",
        country="India",
        pincode="411001",
        customer_category=CustomerCategory.potential,
        preferred_communication_channel=CommunicationChannel.in_person,
        last_contacted_date=date(2024, 1, 5),
        created_by_id=user.id,
    )
    db_session.add(lead)
    db_session.commit()
    db_session.refresh(lead)

    assert lead.id is not None
    assert lead.lead_status == LeadStatus.new
    assert lead.preferred_communication_channel == CommunicationChannel.in_person
    assert lead.created_by == user


def test_enum_labels():
    assert LeadStatus.hot.label == "Hot Lead"
    assert LeadStatus.converted.label == "Converted to Customer"
    assert CustomerCategory.existing.label == "Existing Customer"
    assert CommunicationChannel.in_person.value == "in-person"
