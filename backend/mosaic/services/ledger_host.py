"""Ledger Host — serialized execution of ledger calls on a concurrent server.

Invariants:
    - One asyncio.Lock serializes every call, entries and reads alike
    - An accepted call is persisted before the lock is released
    - If persistence fails, the in-memory ledgers are rolled back to their
      pre-call state and the DatabaseError propagates
    - A read never observes an entry whose persistence is still in flight:
      reads wait for the lock like entries do

Design Decisions:
    - Global serialization over per-portfolio locks: deposits touch the shared
      value ledger, so per-portfolio locks would still need a global one
    - Each save carries only the events appended since the call began
    - Persistence is optional (store=None) for in-process use and core-level tests
"""

import asyncio
import logging

from mosaic.config import Settings
from mosaic.core.domain_types import Principal
from mosaic.core.errors import MosaicError
from mosaic.core.repository_protocols import Clock, LedgerSnapshotRepository
from mosaic.core.transaction import atomic
from mosaic.services.entry_dispatch import EntryDispatch
from mosaic.services.portfolio_engine import PortfolioEngine, PortfolioPair, event_mark

logger = logging.getLogger(__name__)


class LedgerHost:
    """The single writer in front of a PortfolioEngine."""

    def __init__(
        self, engine: PortfolioEngine, store: LedgerSnapshotRepository | None = None,
    ):
        self.engine = engine
        self.dispatch = EntryDispatch(engine)
        self._store = store
        self._lock = asyncio.Lock()

    @classmethod
    async def boot(
        cls,
        settings: Settings,
        store: LedgerSnapshotRepository | None = None,
        clock: Clock | None = None,
    ) -> "LedgerHost":
        """Restore the engine from persisted snapshots, or create and persist a fresh one."""
        rows = await store.load_all() if store is not None else []
        if rows:
            engine = PortfolioEngine.from_snapshots(
                rows, clock,
                share_max_supply=settings.share_max_supply,
                share_decimals=settings.share_decimals,
            )
        else:
            engine = PortfolioEngine.create(
                Principal(settings.admin_principal), clock,
                max_portfolio_fee=settings.max_portfolio_fee_bp,
                share_max_supply=settings.share_max_supply,
                share_decimals=settings.share_decimals,
                genesis_balances=settings.genesis_balances,
            )
        host = cls(engine, store)
        if not rows:
            await host.persist_all()
        return host

    async def execute(
        self, principal: str, entry: str, caller: Principal, args: dict | None,
    ) -> dict:
        """Run one entry point under the lock and persist what it touched."""
        async with self._lock:
            touched = self.dispatch.touched_by(principal)
            marks = {ledger.principal: event_mark(ledger) for ledger in touched}
            try:
                with atomic(*touched):
                    envelope = self.dispatch.execute(principal, entry, caller, args)
                    if "value" in envelope:
                        await self._persist(touched, marks)
            except MosaicError as e:
                e.context.ledger, e.context.entry, e.context.caller = principal, entry, caller
                raise
            return envelope

    async def read(self, principal: str, accessor: str, params: dict | None) -> dict:
        async with self._lock:
            return self.dispatch.read(principal, accessor, params)

    async def open_portfolio(
        self,
        manager: Principal,
        name: str,
        management_fee_bp: int,
        performance_fee_bp: int,
        strategy_id: int | None = None,
        symbol: str | None = None,
    ) -> PortfolioPair:
        """Open a paired portfolio. Raises LedgerError when the registry rejects it."""
        async with self._lock:
            registry = self.engine.registry
            marks = {registry.principal: event_mark(registry)}
            with atomic(registry):
                pair = self.engine.open_portfolio(
                    manager, name, management_fee_bp, performance_fee_bp,
                    strategy_id, symbol,
                )
                try:
                    await self._persist([registry, pair.custody, pair.shares], marks)
                except Exception as e:
                    self.engine.discard(pair.portfolio_id)
                    if isinstance(e, MosaicError):
                        e.context.ledger, e.context.entry, e.context.caller = (
                            registry.principal, "open-portfolio", manager,
                        )
                    raise
            return pair

    async def persist_all(self) -> None:
        async with self._lock:
            await self._persist(self.engine.ledgers(), {})

    async def _persist(self, ledgers: list, marks: dict[Principal, int]) -> None:
        if self._store is None or not ledgers:
            return
        await self._store.save_many(self.engine.snapshot_rows(ledgers, marks))
