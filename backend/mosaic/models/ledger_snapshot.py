"""LedgerSnapshot ORM — one persisted snapshot per ledger principal.

Invariants:
    - principal is the primary key; a ledger is saved by overwriting its row
    - kind is a LedgerKind value (registry | shares | custody | value)
    - snapshot holds the ledger's state tables (state_snapshot()), not its events
    - last_event_id mirrors the ledger's event log length at save time;
      the events themselves live in ledger_events

Design Decisions:
    - JSON column for the whole ledger: state is read back in one piece at boot,
      never queried field by field (ADR: format owned by core/ledger_snapshot.py)
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mosaic.db.base import Base


class LedgerSnapshot(Base):
    """Latest committed state of one ledger."""
    __tablename__ = "ledger_snapshots"

    principal: Mapped[str] = mapped_column(String(256), primary_key=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)
    last_event_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
