"""create crm core tables

Revision ID: 20261001_crm_core
Revises:
Create Date: 2026-10-01

Cria organizações, usuários, leads (temperatura + substatus),
notificações do painel, configurações do CRM e regras de transição.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261001_crm_core'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organizations_slug', 'organizations', ['slug'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='admin'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # ==========================================
    # LEADS
    # ==========================================
    op.create_table(
        'leads',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('temperature', sa.String(20), nullable=False, server_default='novo'),
        sa.Column('hot_substatus', sa.String(30), nullable=True),
        sa.Column('lost_reason', sa.Text(), nullable=True),
        sa.Column('last_interaction_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_leads_organization_id', 'leads', ['organization_id'])
    op.create_index('ix_leads_phone', 'leads', ['phone'])
    op.create_index('ix_leads_temperature', 'leads', ['temperature'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_notifications_organization_id', 'notifications', ['organization_id'])

    # ==========================================
    # CONFIGURAÇÕES E REGRAS DE TEMPERATURA
    # ==========================================
    op.create_table(
        'crm_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('new_to_cold_minutes', sa.Integer(), nullable=False, server_default='1440'),
        sa.Column('hot_to_cold_days', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('hot_to_cold_hours', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('enable_auto_temperature', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('awaiting_response_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('enable_auto_substatus', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('em_conversa_timeout_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('enable_substatus_timeout', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('aguardando_to_cold_hours', sa.Integer(), nullable=False, server_default='48'),
        sa.Column('max_follow_up_attempts', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('default_follow_up_interval', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('enable_cold_lead_alerts', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_crm_settings_organization_id', 'crm_settings', ['organization_id'], unique=True)

    op.create_table(
        'temperature_transition_rules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('trigger_event', sa.String(30), nullable=False, server_default='inactivity_timer'),
        sa.Column('from_temperature', sa.String(20), nullable=True),
        sa.Column('from_substatus', sa.String(30), nullable=True),
        sa.Column('timer_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('action_set_temperature', sa.String(20), nullable=True),
        sa.Column('action_set_substatus', sa.String(30), nullable=True),
        sa.Column('action_clear_substatus', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
    )
    op.create_index(
        'ix_temperature_transition_rules_organization_id', 'temperature_transition_rules', ['organization_id']
    )
    op.create_index('ix_temperature_transition_rules_priority', 'temperature_transition_rules', ['priority'])


def downgrade() -> None:
    op.drop_table('temperature_transition_rules')
    op.drop_table('crm_settings')
    op.drop_table('notifications')
    op.drop_table('leads')
    op.drop_table('users')
    op.drop_table('organizations')
