"""Portfolio Engine — owns the registry, the value ledger and every portfolio pair.

Invariants:
    - open_portfolio either registers a portfolio AND binds a fresh
      (CustodyLedger, ShareLedger) pair to it, or changes nothing
    - Every ledger is reachable by its principal; principals are unique
    - Vault and token principals are derived from the manager and the portfolio id
    - Genesis balances are credited once, when no persisted state exists

Design Decisions:
    - The engine is plain synchronous Python; serialization and persistence
      live in LedgerHost
    - Pairing happens here (off-band from the registry) so the registry stays a
      pure bookkeeping ledger with no knowledge of ledger construction
"""

import logging
from dataclasses import dataclass
from typing import Union

from mosaic.core.custody_ledger import CustodyLedger
from mosaic.core.domain_types import (
    DEFAULT_MAX_PORTFOLIO_FEE, DEFAULT_SHARE_DECIMALS, MAX_SUPPLY,
    LedgerKind, PortfolioId, Principal,
)
from mosaic.core.registry import Registry
from mosaic.core.repository_protocols import Clock
from mosaic.core.share_ledger import ShareLedger
from mosaic.core.transaction import atomic
from mosaic.core.value_ledger import ValueLedger

logger = logging.getLogger(__name__)

VALUE_LEDGER_PRINCIPAL = Principal("native-value")

Ledger = Union[Registry, ShareLedger, CustodyLedger, ValueLedger]


def registry_principal(admin: Principal) -> Principal:
    return Principal(f"{admin}.portfolio-registry")


def vault_principal(manager: Principal, portfolio_id: int) -> Principal:
    return Principal(f"{manager}.portfolio-vault-{portfolio_id}")


def token_principal(manager: Principal, portfolio_id: int) -> Principal:
    return Principal(f"{manager}.portfolio-token-{portfolio_id}")


@dataclass
class PortfolioPair:
    portfolio_id: PortfolioId
    custody: CustodyLedger
    shares: ShareLedger


def event_mark(ledger: Ledger) -> int:
    events = getattr(ledger, "events", None)
    return events.last_event_id if events is not None else 0


def snapshot_row(ledger: Ledger, since: int = 0) -> dict:
    """Persistence row for one ledger: state tables plus the events after since."""
    events = getattr(ledger, "events", None)
    return {
        "principal": ledger.principal,
        "kind": ledger.kind.value,
        "snapshot": ledger.state_snapshot(),
        "last_event_id": event_mark(ledger),
        "events": events.to_snapshot(since) if events is not None else [],
    }


def full_snapshot(row: dict) -> dict:
    """Ledger snapshot with its event log, as restore() expects."""
    return {**row["snapshot"], "events": row.get("events", [])}


class PortfolioEngine:
    """Directory of every ledger plus the off-band portfolio pairing."""

    def __init__(
        self,
        registry: Registry,
        value: ValueLedger,
        clock: Clock | None = None,
        share_max_supply: int = MAX_SUPPLY,
        share_decimals: int = DEFAULT_SHARE_DECIMALS,
    ):
        self.registry = registry
        self.value = value
        self._clock = clock
        self._share_max_supply = share_max_supply
        self._share_decimals = share_decimals
        self._pairs: dict[PortfolioId, PortfolioPair] = {}
        self._ledgers: dict[Principal, Ledger] = {
            registry.principal: registry,
            value.principal: value,
        }

    @classmethod
    def create(
        cls,
        admin: Principal,
        clock: Clock | None = None,
        max_portfolio_fee: int = DEFAULT_MAX_PORTFOLIO_FEE,
        share_max_supply: int = MAX_SUPPLY,
        share_decimals: int = DEFAULT_SHARE_DECIMALS,
        genesis_balances: dict[str, int] | None = None,
    ) -> "PortfolioEngine":
        """Fresh engine: empty registry, value ledger seeded with genesis balances."""
        registry = Registry(
            registry_principal(admin), admin, clock, max_portfolio_fee=max_portfolio_fee,
        )
        value = ValueLedger(VALUE_LEDGER_PRINCIPAL)
        for owner, amount in sorted((genesis_balances or {}).items()):
            value.credit(Principal(owner), amount)
        logger.info(
            f"Engine created with {len(genesis_balances or {})} genesis balances",
            extra={"ledger": registry.principal},
        )
        return cls(registry, value, clock, share_max_supply, share_decimals)

    @classmethod
    def from_snapshots(
        cls,
        rows: list[dict],
        clock: Clock | None = None,
        share_max_supply: int = MAX_SUPPLY,
        share_decimals: int = DEFAULT_SHARE_DECIMALS,
    ) -> "PortfolioEngine":
        """Rebuild every ledger from persisted rows and re-pair them."""
        by_kind: dict[str, list[dict]] = {kind.value: [] for kind in LedgerKind}
        for row in rows:
            by_kind[row["kind"]].append(row)
        if len(by_kind[LedgerKind.REGISTRY.value]) != 1:
            raise ValueError("exactly one registry snapshot is required")
        if len(by_kind[LedgerKind.VALUE.value]) != 1:
            raise ValueError("exactly one value ledger snapshot is required")

        registry_row = by_kind[LedgerKind.REGISTRY.value][0]
        registry = Registry(
            Principal(registry_row["principal"]),
            Principal(registry_row["snapshot"]["admin"]), clock,
        )
        registry.restore(full_snapshot(registry_row))
        value_row = by_kind[LedgerKind.VALUE.value][0]
        value = ValueLedger(Principal(value_row["principal"]))
        value.restore(full_snapshot(value_row))
        engine = cls(registry, value, clock, share_max_supply, share_decimals)

        for row in by_kind[LedgerKind.SHARES.value]:
            data = full_snapshot(row)
            shares = ShareLedger(
                Principal(data["principal"]), Principal(data["manager"]), clock=clock,
            )
            shares.restore(data)
            engine._ledgers[shares.principal] = shares
        for row in by_kind[LedgerKind.CUSTODY.value]:
            data = full_snapshot(row)
            custody = CustodyLedger(
                Principal(data["principal"]), Principal(data["manager"]), value, clock,
            )
            custody.restore(data)
            bound = engine._ledgers.get(custody.get_share_ledger())
            custody.rebind_share_ledger(bound if isinstance(bound, ShareLedger) else None)
            engine._ledgers[custody.principal] = custody

        for portfolio_id, portfolio in registry.state.portfolios.items():
            custody = engine._ledgers.get(portfolio.vault_ref)
            shares = engine._ledgers.get(portfolio.token_ref)
            if isinstance(custody, CustodyLedger) and isinstance(shares, ShareLedger):
                engine._pairs[portfolio_id] = PortfolioPair(portfolio_id, custody, shares)
        logger.info(
            f"Engine restored: {len(rows)} ledgers, {len(engine._pairs)} portfolios",
            extra={"ledger": registry.principal},
        )
        return engine

    # --- Pairing -----------------------------------------------------------

    def open_portfolio(
        self,
        manager: Principal,
        name: str,
        management_fee_bp: int,
        performance_fee_bp: int,
        strategy_id: int | None = None,
        symbol: str | None = None,
    ) -> PortfolioPair:
        """Register a portfolio and bind a fresh vault + share ledger to it.

        Raises LedgerError with the registry's code if the portfolio is rejected.
        """
        next_id = self.registry.get_next_portfolio_id()
        vault = vault_principal(manager, next_id)
        token = token_principal(manager, next_id)
        with atomic(self.registry):
            portfolio_id = self.registry.create_portfolio(
                manager, name, vault, token,
                management_fee_bp, performance_fee_bp, strategy_id,
            )
            shares = ShareLedger(
                token, manager, name=name, symbol=symbol or f"MPS{portfolio_id}",
                decimals=self._share_decimals, max_supply=self._share_max_supply,
                clock=self._clock,
            )
            custody = CustodyLedger(vault, manager, self.value, self._clock)
            shares.initialize(manager, vault)
            custody.initialize(manager, portfolio_id, shares)
        pair = PortfolioPair(portfolio_id, custody, shares)
        self._pairs[portfolio_id] = pair
        self._ledgers[vault] = custody
        self._ledgers[token] = shares
        logger.info(
            f"Portfolio {portfolio_id} opened",
            extra={"caller": manager, "portfolio_id": portfolio_id, "ledger": vault},
        )
        return pair

    def discard(self, portfolio_id: int) -> None:
        """Forget a pair whose registration was rolled back."""
        pair = self._pairs.pop(portfolio_id, None)
        if pair is not None:
            self._ledgers.pop(pair.custody.principal, None)
            self._ledgers.pop(pair.shares.principal, None)

    # --- Lookup ------------------------------------------------------------

    def resolve(self, principal: Principal | None) -> Ledger | None:
        if principal is None:
            return None
        return self._ledgers.get(principal)

    def pair(self, portfolio_id: int) -> PortfolioPair | None:
        return self._pairs.get(portfolio_id)

    def ledgers(self) -> list[Ledger]:
        return list(self._ledgers.values())

    def collaborators(self, ledger: Ledger) -> list[Ledger]:
        """The ledger plus every ledger its entry points may write to."""
        if isinstance(ledger, CustodyLedger):
            return [
                participant
                for participant in (ledger, ledger.share_ledger, self.value)
                if participant is not None
            ]
        return [ledger]

    def snapshot_rows(
        self, ledgers: list[Ledger] | None = None, since: dict[Principal, int] | None = None,
    ) -> list[dict]:
        """Rows for the given ledgers (default: all); since maps principal to last persisted event id."""
        since = since or {}
        return [
            snapshot_row(ledger, since.get(ledger.principal, 0))
            for ledger in (ledgers or self.ledgers())
        ]
