"""Create ledger_snapshots table.

Revision ID: 001_ledger_snapshots
Revises:
Create Date: 2026-10-18

One row per ledger principal holding the ledger's latest committed
snapshot (registry, share ledgers, custody vaults, value ledger).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_ledger_snapshots'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ledger_snapshots',
        sa.Column('principal', sa.String(256), primary_key=True),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('snapshot', sa.JSON(), nullable=False),
        sa.Column('last_event_id', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_ledger_snapshots_kind', 'ledger_snapshots', ['kind'])


def downgrade() -> None:
    op.drop_index('ix_ledger_snapshots_kind', table_name='ledger_snapshots')
    op.drop_table('ledger_snapshots')
