"""Events table

Revision ID: 001_events_table
Revises:
Create Date: 2026-01-05

Creates the events table holding standalone events and recurring series
instances:
- uid primary key (caller-supplied or server-generated gen_xxx)
- dtstart/dtend as TIMESTAMP WITH TIME ZONE
- Series attributes stored on every instance (series_id, recurring_days,
  recur_until, series_start_date)
- Indexes for listing order, series lookups and name autocomplete
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_events_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create events table.

    Column spec:
    - recurring_days: JSONB list of weekday selectors (0=Sunday..6=Saturday)
    - series_id: nullable, shared by all instances of a series
    """
    op.create_table(
        'events',
        sa.Column('uid', sa.String(length=255), nullable=False),
        sa.Column('summary', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=64), nullable=False),
        sa.Column('dtstart', sa.DateTime(timezone=True), nullable=False),
        sa.Column('dtend', sa.DateTime(timezone=True), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurring_days', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('series_id', sa.String(length=255), nullable=True),
        sa.Column('recur_until', sa.Date(), nullable=True),
        sa.Column('series_start_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uid'),
        sa.CheckConstraint('dtend >= dtstart', name='ck_events_dtend_after_dtstart'),
    )

    op.create_index('ix_events_dtstart', 'events', ['dtstart'])
    op.create_index('ix_events_series_id', 'events', ['series_id'])
    op.create_index('ix_events_summary', 'events', ['summary'])


def downgrade() -> None:
    """Drop events table."""
    op.drop_index('ix_events_summary', table_name='events')
    op.drop_index('ix_events_series_id', table_name='events')
    op.drop_index('ix_events_dtstart', table_name='events')
    op.drop_table('events')
