"""initial_schema

Revision ID: 3f1c2a7d9b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a7d9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """
    Create the InvestTrack schema.

    Creates:
    - users and tokens (password-reset codes)
    - firms (broker/investor, single table) and fund_factsheets
    - members (broker/investor, single table) and member_firm_history
    - coverages, interactions, events and files
    """
    # 1. Users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=6), nullable=False),
        sa.Column('avatar', sa.String(length=1024), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tokens_user_id', 'tokens', ['user_id'])

    # 2. Firms (both variants share the table, told apart by firm_type)
    op.create_table(
        'firms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_type', sa.String(length=8), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location_type', sa.String(length=8), nullable=False),
        sa.Column('website', sa.String(length=1024), nullable=True),
        sa.Column('remark', sa.Text(), nullable=True),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        # Broker
        sa.Column('sectors', sa.JSON(), nullable=True),
        # Investor
        sa.Column('regional_focus', sa.JSON(), nullable=True),
        sa.Column('fund_size_global', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('fund_size_indian', sa.Numeric(precision=18, scale=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_firms_firm_type', 'firms', ['firm_type'])
    op.create_index('ix_firms_name', 'firms', ['name'], unique=True)
    op.create_index('ix_firms_created_by_id', 'firms', ['created_by_id'])
    op.create_index('ix_firms_is_active', 'firms', ['is_active'])

    # 3. Members (both variants share the table, told apart by member_type)
    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_type', sa.String(length=8), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('designation', sa.String(length=255), nullable=False),
        sa.Column('mobile_country_code', sa.String(length=8), nullable=True),
        sa.Column('mobile_number', sa.String(length=32), nullable=True),
        sa.Column('office_country_code', sa.String(length=8), nullable=True),
        sa.Column('office_number', sa.String(length=32), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('is_gift', sa.Boolean(), nullable=False),
        sa.Column('sectors', sa.JSON(), nullable=True),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('business_card_front_id', sa.Integer(), nullable=True),
        sa.Column('business_card_back_id', sa.Integer(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        # Investor member
        sa.Column('fund_size_global', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('fund_size_indian', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('regional_focus', sa.JSON(), nullable=True),
        sa.Column('is_existing_investor', sa.Boolean(), nullable=True),
        sa.Column('holding_size', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('last_holding_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('mobile_number'),
        # Ids of moved members are never handed out again
        sqlite_autoincrement=True
    )
    op.create_index('ix_members_member_type', 'members', ['member_type'])
    op.create_index('ix_members_name', 'members', ['name'])
    op.create_index('ix_members_firm_id', 'members', ['firm_id'])

    op.create_table(
        'member_firm_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('date_of_joining', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_member_firm_history_member_id', 'member_firm_history', ['member_id'])
    op.create_index('ix_member_firm_history_firm_id', 'member_firm_history', ['firm_id'])

    # 4. Attachments
    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=True),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('content', sa.LargeBinary(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.ForeignKeyConstraint(
            ['member_id'], ['members.id'], deferrable=True, initially='DEFERRED'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_files_firm_id', 'files', ['firm_id'])
    op.create_index('ix_files_member_id', 'files', ['member_id'])

    op.create_table(
        'fund_factsheets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('file_id', sa.Integer(), nullable=False),
        sa.Column('document_date', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.ForeignKeyConstraint(['file_id'], ['files.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('file_id')
    )
    op.create_index('ix_fund_factsheets_firm_id', 'fund_factsheets', ['firm_id'])

    # 5. Coverages, interactions and events
    op.create_table(
        'coverages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('tp', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('fiscal_year', sa.Integer(), nullable=False),
        sa.Column('quarter', sa.Integer(), nullable=False),
        sa.Column('recommendation', sa.String(length=10), nullable=False),
        sa.Column('coverage_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('coverage_file_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.ForeignKeyConstraint(['coverage_file_id'], ['files.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('firm_id', 'fiscal_year', 'quarter', name='uq_coverage_period')
    )
    op.create_index('ix_coverages_firm_id', 'coverages', ['firm_id'])

    op.create_table(
        'interactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('date_of_interaction', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.ForeignKeyConstraint(
            ['member_id'], ['members.id'], deferrable=True, initially='DEFERRED'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_interactions_firm_id', 'interactions', ['firm_id'])
    op.create_index('ix_interactions_member_id', 'interactions', ['member_id'])
    op.create_index(
        'ix_interactions_date_of_interaction', 'interactions', ['date_of_interaction']
    )
    op.create_index(
        'ix_interactions_member_date', 'interactions', ['member_id', 'date_of_interaction']
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('firm_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('mode', sa.String(length=8), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('internal_attendees', sa.Text(), nullable=True),
        sa.Column('next_step', sa.String(length=9), nullable=False),
        sa.Column('is_invited', sa.Boolean(), nullable=False),
        sa.Column('exchange_intimated', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['firm_id'], ['firms.id']),
        sa.ForeignKeyConstraint(
            ['member_id'], ['members.id'], deferrable=True, initially='DEFERRED'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_firm_id', 'events', ['firm_id'])
    op.create_index('ix_events_member_id', 'events', ['member_id'])


def downgrade() -> None:
    """Drop every InvestTrack table."""
    op.drop_table('events')
    op.drop_table('interactions')
    op.drop_table('coverages')
    op.drop_table('fund_factsheets')
    op.drop_table('files')
    op.drop_table('member_firm_history')
    op.drop_table('members')
    op.drop_table('firms')
    op.drop_table('tokens')
    op.drop_table('users')
