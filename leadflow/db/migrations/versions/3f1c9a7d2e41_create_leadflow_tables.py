"""create users, login_sessions and leads tables

Revision ID: 3f1c9a7d2e41
Revises:
Create Date: 2026-10-18 09:12:30.418223

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c9a7d2e41'
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum('admin', 'manager', 'user', name='userrole')
customer_category = sa.Enum('existing', 'potential', name='customercategory')
communication_channel = sa.Enum('email', 'phone', 'whatsapp', 'sms', 'in-person', name='communicationchannel')
lead_source = sa.Enum('website', 'referral', 'linkedin', 'facebook', 'twitter', 'campaign', 'other', name='leadsource')
lead_status = sa.Enum('new', 'followup', 'qualified', 'hot', 'converted', 'lost', name='leadstatus')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('two_factor_enabled', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'login_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_pending_2fa', sa.Boolean(), nullable=False),
        sa.Column('two_factor_login', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('authenticated_at', sa.DateTime(), nullable=True),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_login_sessions_id', 'login_sessions', ['id'])
    op.create_index('ix_login_sessions_user_id', 'login_sessions', ['user_id'])

    op.create_table(
        'leads',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(32), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('city', sa.String(120), nullable=False),
        sa.Column('state', sa.String(120), nullable=False),
        sa.Column('country', sa.String(120), nullable=False),
        sa.Column('pincode', sa.String(6), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('designation', sa.String(255), nullable=True),
        sa.Column('customer_category', customer_category, nullable=False),
        sa.Column('last_contacted_date', sa.Date(), nullable=True),
        sa.Column('last_contacted_by', sa.String(50), nullable=True),
        sa.Column('next_followup_date', sa.Date(), nullable=True),
        sa.Column('customer_interested_in', sa.String(100), nullable=True),
        sa.Column('preferred_communication_channel', communication_channel, nullable=True),
        sa.Column('lead_source', lead_source, nullable=True),
        sa.Column('custom_lead_source', sa.String(50), nullable=True),
        sa.Column('lead_status', lead_status, nullable=False),
        sa.Column('additional_notes', sa.Text(), nullable=True),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_leads_id', 'leads', ['id'])
    op.create_index('ix_leads_name', 'leads', ['name'])
    op.create_index('ix_leads_email', 'leads', ['email'])
    op.create_index('ix_leads_city', 'leads', ['city'])
    op.create_index('ix_leads_customer_category', 'leads', ['customer_category'])
    op.create_index('ix_leads_last_contacted_date', 'leads', ['last_contacted_date'])
    op.create_index('ix_leads_lead_status', 'leads', ['lead_status'])
    op.create_index('ix_leads_created_by_id', 'leads', ['created_by_id'])


def downgrade() -> None:
    op.drop_table('leads')
    op.drop_table('login_sessions')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (lead_status, lead_source, communication_channel, customer_category, user_role):
        enum_type.drop(bind, checkfirst=True)
