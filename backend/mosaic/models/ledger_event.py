"""LedgerEventRecord ORM — the append-only audit trail, one row per event.

Invariants:
    - (principal, event_id) is the primary key; ids are dense per principal
    - Rows are only ever inserted; a committed event is never rewritten
    - payload holds the event as produced by EventLog.to_snapshot()
"""

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mosaic.db.base import Base


class LedgerEventRecord(Base):
    """One committed event of one ledger."""
    __tablename__ = "ledger_events"

    principal: Mapped[str] = mapped_column(String(256), primary_key=True)
    event_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_type: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
