"""Boundary Protocols — contracts between the ledgers and their collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Cross-ledger calls go through these capabilities, never through another
      ledger's tables
    - Snapshot persistence is accessed only through LedgerSnapshotRepository

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Capabilities are synchronous: a nested ledger call runs inside the outer
      transaction; only the persistence boundary is async
"""

from typing import Any, Protocol

from mosaic.core.domain_types import Principal


class Clock(Protocol):
    """Source of block height and timestamp for event records."""
    def block_height(self) -> int: ...
    def timestamp(self) -> int: ...


class Transactional(Protocol):
    """Anything that can be checkpointed and rolled back to that checkpoint."""
    def checkpoint(self) -> Any: ...
    def rollback(self, checkpoint: Any) -> None: ...


class ShareIssuer(Transactional, Protocol):
    """Mint/burn capability a custody ledger holds on its share ledger.

    The issuer authorizes by identity: the caller passed in must equal the
    vault principal the issuer was initialized with.
    """
    principal: Principal

    def mint(self, caller: Principal, recipient: Principal | None, amount: int) -> bool: ...
    def burn(self, caller: Principal, amount: int) -> bool: ...


class ValueSettlement(Transactional, Protocol):
    """Native value-unit transfers a custody ledger settles deposits against."""
    def transfer(
        self, caller: Principal, sender: Principal, recipient: Principal, amount: int,
    ) -> bool: ...
    def get_balance(self, owner: Principal) -> int: ...


class LedgerSnapshotRepository(Protocol):
    """Contract for ledger snapshot persistence — implemented by shell.

    Rows are dicts with principal, kind, snapshot (state tables only),
    last_event_id and events (the events appended since the last save).
    save_many upserts the state rows, appends the events, and commits all or none.
    load_all returns every row with its complete event list.
    """
    async def save_many(self, rows: list[dict]) -> None: ...
    async def load_all(self) -> list[dict]: ...
