"""Custody Ledger (vault) — investor deposits, withdrawals and asset records.

Invariants:
    - deposit = value transfer in + balance credit + TVL increase + mint, as one unit
    - withdraw = balance debit + TVL decrease + burn of vault-held shares +
      value transfer out, as one unit
    - If any nested step raises, atomic() restores the vault, the value ledger
      and the share ledger to their pre-call state and the error propagates
    - Asset records are manager-curated and independent of investor balances
    - initialize may be called again; it rebinds portfolio and share ledger
    - Read accessors return copies; records change only through entry points

Design Decisions:
    - The vault holds a ShareIssuer capability, not a principal string; the
      issuer authorizes the vault by comparing the vault's own principal
"""

import copy
from dataclasses import replace

from mosaic.core.custody_state import AssetHolding, CustodyState
from mosaic.core.domain_types import AssetId, EventType, LedgerKind, PortfolioId, Principal
from mosaic.core.enforce_custody import (
    check_manager,
    validate_add_asset,
    validate_deposit,
    validate_initialize,
    validate_remove_asset,
    validate_withdraw,
)
from mosaic.core.errors import LedgerError, Rejection
from mosaic.core.event_log import Event, EventLog
from mosaic.core.ledger_snapshot import custody_from_snapshot, custody_to_snapshot
from mosaic.core.repository_protocols import Clock, ShareIssuer, ValueSettlement
from mosaic.core.transaction import atomic


class CustodyLedger:
    """Per-portfolio vault settling against a value ledger and a share ledger."""

    kind = LedgerKind.CUSTODY

    def __init__(
        self, principal: Principal, manager: Principal,
        value_ledger: ValueSettlement, clock: Clock | None = None,
    ):
        self.state = CustodyState(principal=principal, manager=manager)
        self.events = EventLog(clock)
        self._value = value_ledger
        self._shares: ShareIssuer | None = None

    @property
    def principal(self) -> Principal:
        return self.state.principal

    @property
    def share_ledger(self) -> ShareIssuer | None:
        return self._shares

    def _guard(self, error: Rejection | None) -> None:
        if error:
            raise LedgerError(self.kind, error)

    # --- Manager entry points ----------------------------------------------

    def initialize(
        self, caller: Principal, portfolio_id: int, share_ledger: ShareIssuer | None,
        share_ref: Principal | None = None,
    ) -> bool:
        """Bind the vault to a portfolio and its share ledger.

        share_ref names a ledger that could not be resolved to a share ledger;
        it is rejected with INVALID_TOKEN_CONTRACT after the manager and enabled checks.
        """
        if share_ledger is not None:
            share_ref = share_ledger.principal
        self._guard(validate_initialize(
            self.state, caller, portfolio_id, share_ref, share_ledger is not None,
        ))
        self.state.portfolio_id = PortfolioId(portfolio_id)
        self.state.share_ledger_ref = share_ref
        self._shares = share_ledger
        self.events.append(
            EventType.VAULT_INITIALIZED, caller, portfolio_id=portfolio_id,
        )
        return True

    def set_enabled(self, caller: Principal, enabled: bool) -> bool:
        self._guard(check_manager(self.state, caller))
        self.state.contract_enabled = bool(enabled)
        self.events.append(
            EventType.VAULT_ENABLED if enabled else EventType.VAULT_DISABLED, caller,
        )
        return self.state.contract_enabled

    def add_asset(
        self, caller: Principal, asset_id: int,
        asset_contract: Principal | None, amount: int,
    ) -> bool:
        self._guard(validate_add_asset(self.state, caller, asset_id, asset_contract, amount))
        self.state.assets[AssetId(asset_id)] = AssetHolding(asset_contract, amount)
        self.events.append(EventType.ASSET_ADDED, caller, asset_id=asset_id, amount=amount)
        return True

    def remove_asset(self, caller: Principal, asset_id: int) -> bool:
        self._guard(validate_remove_asset(self.state, caller, asset_id))
        holding = self.state.assets.pop(AssetId(asset_id))
        self.events.append(
            EventType.ASSET_REMOVED, caller, asset_id=asset_id, amount=holding.amount,
        )
        return True

    # --- Investor entry points ---------------------------------------------

    def deposit(self, caller: Principal, amount: int) -> bool:
        self._guard(validate_deposit(self.state, amount))
        with atomic(self, self._value, self._shares):
            self._value.transfer(caller, caller, self.principal, amount)
            self.state.investor_balances[caller] = self.state.balance_of(caller) + amount
            self.state.total_value_locked += amount
            self._shares.mint(self.principal, caller, amount)
            self.events.append(EventType.DEPOSIT, caller, investor=caller, amount=amount)
        return True

    def withdraw(self, caller: Principal, amount: int) -> bool:
        """Burns shares the vault already holds; route them in with transfer first.

        The vault's share balance is one pool. The burn does not check who
        routed the shares in, so shares transferred by one investor can cover
        another investor's withdraw; the caller's own shares stay where they are.
        """
        self._guard(validate_withdraw(self.state, caller, amount))
        with atomic(self, self._value, self._shares):
            self.state.investor_balances[caller] = self.state.balance_of(caller) - amount
            self.state.total_value_locked -= amount
            self._shares.burn(self.principal, amount)
            self._value.transfer(self.principal, self.principal, caller, amount)
            self.events.append(EventType.WITHDRAW, caller, investor=caller, amount=amount)
        return True

    # --- Read accessors ----------------------------------------------------

    def get_investor_balance(self, investor: Principal | None) -> int:
        return self.state.balance_of(investor)

    def get_total_value_locked(self) -> int:
        return self.state.total_value_locked

    def get_asset(self, asset_id: int) -> AssetHolding:
        return replace(self.state.assets.get(asset_id, AssetHolding()))

    def get_portfolio_id(self) -> PortfolioId:
        return self.state.portfolio_id

    def get_share_ledger(self) -> Principal | None:
        return self.state.share_ledger_ref

    def is_enabled(self) -> bool:
        return self.state.contract_enabled

    def get_event(self, event_id: int) -> Event | None:
        return self.events.get(event_id)

    # --- Transactional -----------------------------------------------------

    def checkpoint(self) -> tuple:
        return copy.deepcopy(self.state), self.events.last_event_id, self._shares

    def rollback(self, checkpoint: tuple) -> None:
        state, last_event_id, shares = checkpoint
        self.state = state
        self.events.truncate(last_event_id)
        self._shares = shares

    # --- Snapshot ----------------------------------------------------------

    def state_snapshot(self) -> dict:
        """State tables only, JSON-safe."""
        return custody_to_snapshot(self.state)

    def snapshot(self) -> dict:
        return {**self.state_snapshot(), "events": self.events.to_snapshot()}

    def restore(self, snapshot: dict) -> None:
        """Restore tables and log. The bound ShareIssuer object is kept as-is."""
        self.state = custody_from_snapshot(snapshot)
        self.events.load_snapshot(snapshot.get("events", []))

    def rebind_share_ledger(self, share_ledger: ShareIssuer | None) -> None:
        """Reattach the issuer after loading a persisted snapshot."""
        if share_ledger is not None and share_ledger.principal != self.state.share_ledger_ref:
            raise ValueError(
                f"share ledger {share_ledger.principal} does not match "
                f"bound ref {self.state.share_ledger_ref}"
            )
        self._shares = share_ledger
