"""Ledger Snapshot Store — SQLAlchemy persistence for ledger state and events.

Invariants:
    - One state row per ledger principal; saving overwrites it (session.merge)
    - Events are appended by (principal, event_id); re-saving an event is a no-op
    - save_many writes every row and event in one transaction: all or none
    - Database failures surface as DatabaseError (via DatabaseSessionManager)

Design Decisions:
    - A save carries only the events the call produced, so write cost follows
      the size of the call, not the length of the ledger's history
"""

import logging
from collections import defaultdict

from sqlalchemy import select

from mosaic.infrastructure.database import DatabaseSessionManager
from mosaic.models.ledger_event import LedgerEventRecord
from mosaic.models.ledger_snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)


class LedgerSnapshotStore:
    """Implements LedgerSnapshotRepository on ledger_snapshots + ledger_events."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def save_many(self, rows: list[dict]) -> None:
        if not rows:
            return
        appended = 0
        async with self._db.session() as session:
            for row in rows:
                await session.merge(LedgerSnapshot(
                    principal=row["principal"],
                    kind=row["kind"],
                    snapshot=row["snapshot"],
                    last_event_id=row["last_event_id"],
                ))
                for event in row.get("events", []):
                    await session.merge(LedgerEventRecord(
                        principal=row["principal"],
                        event_id=event["event_id"],
                        event_type=event["event_type"],
                        payload=event,
                    ))
                    appended += 1
            await session.commit()
        logger.debug(f"Persisted {len(rows)} ledger states, {appended} events")

    async def load_all(self) -> list[dict]:
        async with self._db.session() as session:
            states = await session.execute(
                select(LedgerSnapshot).order_by(LedgerSnapshot.principal),
            )
            events = await session.execute(
                select(LedgerEventRecord).order_by(
                    LedgerEventRecord.principal, LedgerEventRecord.event_id,
                ),
            )
            by_principal: dict[str, list[dict]] = defaultdict(list)
            for record in events.scalars().all():
                by_principal[record.principal].append(record.payload)
            return [
                {
                    "principal": row.principal,
                    "kind": row.kind,
                    "snapshot": row.snapshot,
                    "last_event_id": row.last_event_id,
                    "events": by_principal.get(row.principal, []),
                }
                for row in states.scalars().all()
            ]
