"""ORM Models — SQLAlchemy declarative models for persisted ledger state.

Invariants:
    - All models inherit from Base (db/base.py)
    - Ledger state tables are one row per ledger principal; events are
      appended one row each and never rewritten

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs
"""

from mosaic.models.ledger_event import LedgerEventRecord  # noqa: F401
from mosaic.models.ledger_snapshot import LedgerSnapshot  # noqa: F401
