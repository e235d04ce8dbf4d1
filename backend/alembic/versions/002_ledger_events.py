"""Create ledger_events table.

Revision ID: 002_ledger_events
Revises: 001_ledger_snapshots
Create Date: 2026-10-18

Events move out of the snapshot rows into an append-only table so a save
writes only the events a call produced.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_ledger_events'
down_revision: Union[str, None] = '001_ledger_snapshots'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ledger_events',
        sa.Column('principal', sa.String(256), primary_key=True),
        sa.Column('event_id', sa.Integer(), primary_key=True),
        sa.Column('event_type', sa.String(40), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
    )
    op.create_index('ix_ledger_events_event_type', 'ledger_events', ['event_type'])


def downgrade() -> None:
    op.drop_index('ix_ledger_events_event_type', table_name='ledger_events')
    op.drop_table('ledger_events')
