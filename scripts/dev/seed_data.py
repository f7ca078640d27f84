#!/usr/bin/env python
"""Seed database with sample users and leads."""
from datetime import date

from sqlalchemy.orm import Session

from leadflow.db.base import SessionLocal, engine, Base
from leadflow.models import Lead, User, UserRole, LeadStatus, CustomerCategory, CommunicationChannel, LeadSource
from leadflow.repositories.user_repo import UserRepository

SAMPLE_USERS = [
    ("admin@leadflow.com", "admin123", "Admin User", UserRole.admin, False),
    ("john.doe@leadflow.com", "password123", "John Doe", UserRole.user, False),
    ("secure.user@leadflow.com", "password123", "Secure User", UserRole.manager, True),
]

SAMPLE_LEADS = [
    dict(
        name="John Smith",
        phone_number="+1 (555) 123-4567",
        email="john.smith@techcorp.com",
        date_of_birth=date(1985, 3, 15),
        city="New York",
        state="New York",
        country="United States",
        pincode="10001",
        company_name="TechCorp Solutions",
        designation="CTO",
        customer_category=CustomerCategory.potential,
        last_contacted_date=date(2024, 1, 15),
        last_contacted_by="Sarah Johnson",
        next_followup_date=date(2024, 2, 1),
        customer_interested_in="Enterprise software solutions",
        preferred_communication_channel=CommunicationChannel.email,
        lead_source=LeadSource.website,
        lead_status=LeadStatus.hot,
        additional_notes="Interested in the enterprise package, budget approved",
    ),
    dict(
        name="Emily Chen",
        phone_number="+1 (555) 987-6543",
        email="emily.chen@startup.io",
        city="San Francisco",
        state="California",
        country="United States",
        pincode="94102",
        company_name="InnovateStartup",
        designation="Founder",
        customer_category=CustomerCategory.potential,
        last_contacted_date=date(2024, 1, 10),
        last_contacted_by="Mike Wilson",
        next_followup_date=date(2024, 1, 25),
        customer_interested_in="Cloud infrastructure tools",
        preferred_communication_channel=CommunicationChannel.phone,
        lead_source=LeadSource.referral,
        lead_status=LeadStatus.qualified,
        additional_notes="Needs a solution for 50+ developers",
    ),
    dict(
        name="Robert Davis",
        phone_number="+1 (555) 456-7890",
        email="robert.davis@manufacturing.com",
        date_of_birth=date(1978, 8, 22),
        city="Chicago",
        state="Illinois",
        country="United States",
        pincode="60601",
        company_name="Davis Manufacturing",
        designation="Operations Manager",
        customer_category=CustomerCategory.existing,
        last_contacted_date=date(2024, 1, 20),
        last_contacted_by="Lisa Anderson",
        next_followup_date=date(2024, 2, 5),
        customer_interested_in="Inventory management systems",
        preferred_communication_channel=CommunicationChannel.whatsapp,
        lead_source=LeadSource.linkedin,
        lead_status=LeadStatus.followup,
    ),
]


def seed_users(db: Session):
    """Create sample users."""
    users = UserRepository(db)
    for email, password, name, role, two_factor in SAMPLE_USERS:
        if users.get_by_email(email):
            continue
        users.create_user(email, password, name, role=role, two_factor_enabled=two_factor)
        print(f"  → Created user: {email} (role: {role.value})")
    print("✅ Created sample users")


def seed_leads(db: Session):
    """Create sample leads owned by the admin."""
    admin = UserRepository(db).get_by_email("admin@leadflow.com")
    for data in SAMPLE_LEADS:
        existing = db.query(Lead).filter(Lead.email == data["email"]).first()
        if not existing:
            db.add(Lead(created_by_id=admin.id if admin else None, **data))
            print(f"  → Created lead: {data['name']}")

    db.commit()
    print("✅ Created sample leads")


if __name__ == "__main__":
    print("🌱 Seeding database...")
    print("=" * 50)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_users(db)
        seed_leads(db)
        print("=" * 50)
        print("✅ Database seeded successfully!")
        print("\n📝 Sample Credentials:")
        for email, password, _, _, two_factor in SAMPLE_USERS:
            print(f"   {email} / {password}{' (2FA)' if two_factor else ''}")
    finally:
        db.close()
