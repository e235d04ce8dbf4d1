"""Share Ledger — fungible shares for one portfolio.

Invariants:
    - mint/burn accept only the bound vault principal as caller
    - burn always debits the caller's own balance (the vault's custody)
    - transfer/approve/transfer_from are holder-initiated
    - sum(balances) == total_supply <= max_supply after every call
    - initialize may be called again; it rebinds the vault
"""

import copy

from mosaic.core.domain_types import (
    DEFAULT_SHARE_DECIMALS, MAX_SUPPLY, EventType, LedgerKind, Principal,
)
from mosaic.core.enforce_shares import (
    validate_approve,
    validate_burn,
    validate_initialize,
    validate_mint,
    validate_transfer,
    validate_transfer_from,
)
from mosaic.core.errors import LedgerError, Rejection
from mosaic.core.event_log import Event, EventLog
from mosaic.core.ledger_snapshot import share_ledger_from_snapshot, share_ledger_to_snapshot
from mosaic.core.repository_protocols import Clock
from mosaic.core.share_ledger_state import ShareLedgerState


class ShareLedger:
    """Mintable, burnable, transferable shares with allowances."""

    kind = LedgerKind.SHARES

    def __init__(
        self,
        principal: Principal,
        manager: Principal,
        name: str = "",
        symbol: str = "",
        decimals: int = DEFAULT_SHARE_DECIMALS,
        max_supply: int = MAX_SUPPLY,
        clock: Clock | None = None,
    ):
        self.state = ShareLedgerState(
            principal=principal, manager=manager, name=name, symbol=symbol,
            decimals=decimals, max_supply=max_supply,
        )
        self.events = EventLog(clock)

    @property
    def principal(self) -> Principal:
        return self.state.principal

    def _guard(self, error: Rejection | None) -> None:
        if error:
            raise LedgerError(self.kind, error)

    # --- Manager entry points ----------------------------------------------

    def initialize(self, caller: Principal, vault_ref: Principal | None) -> bool:
        self._guard(validate_initialize(self.state, caller, vault_ref))
        self.state.vault_ref = vault_ref
        self.events.append(EventType.VAULT_INITIALIZED, caller, account=vault_ref)
        return True

    def set_enabled(self, caller: Principal, enabled: bool) -> bool:
        if caller != self.state.manager:
            raise LedgerError(self.kind, Rejection.NOT_AUTHORIZED)
        self.state.contract_enabled = bool(enabled)
        self.events.append(
            EventType.TOKEN_ENABLED if enabled else EventType.TOKEN_DISABLED, caller,
        )
        return self.state.contract_enabled

    # --- Vault-only entry points -------------------------------------------

    def mint(self, caller: Principal, recipient: Principal | None, amount: int) -> bool:
        self._guard(validate_mint(self.state, caller, recipient, amount))
        self.state.balances[recipient] = self.state.balance_of(recipient) + amount
        self.state.total_supply += amount
        self.events.append(EventType.MINT, caller, account=recipient, amount=amount)
        return True

    def burn(self, caller: Principal, amount: int) -> bool:
        self._guard(validate_burn(self.state, caller, amount))
        self.state.balances[caller] = self.state.balance_of(caller) - amount
        self.state.total_supply -= amount
        self.events.append(EventType.BURN, caller, account=caller, amount=amount)
        return True

    # --- Holder entry points -----------------------------------------------

    def transfer(self, caller: Principal, recipient: Principal | None, amount: int) -> bool:
        self._guard(validate_transfer(self.state, caller, recipient, amount))
        self._move(caller, recipient, amount)
        self.events.append(EventType.TRANSFER, caller, account=recipient, amount=amount)
        return True

    def approve(self, caller: Principal, spender: Principal | None, amount: int) -> bool:
        """Overwrite (not add to) the caller's allowance for spender."""
        self._guard(validate_approve(self.state, spender, amount))
        self.state.allowances[(caller, spender)] = amount
        self.events.append(EventType.APPROVE, caller, spender=spender, amount=amount)
        return True

    def transfer_from(
        self, caller: Principal, owner: Principal | None,
        recipient: Principal | None, amount: int,
    ) -> bool:
        self._guard(validate_transfer_from(self.state, caller, owner, recipient, amount))
        self.state.allowances[(owner, caller)] = self.state.allowance_of(owner, caller) - amount
        self._move(owner, recipient, amount)
        self.events.append(
            EventType.TRANSFER_FROM, caller,
            account=recipient, spender=caller, amount=amount,
        )
        return True

    def _move(self, sender: Principal, recipient: Principal, amount: int) -> None:
        # Debit before credit so a self-transfer nets to zero.
        self.state.balances[sender] = self.state.balance_of(sender) - amount
        self.state.balances[recipient] = self.state.balance_of(recipient) + amount

    # --- Read accessors ----------------------------------------------------

    def get_balance(self, owner: Principal | None) -> int:
        return self.state.balance_of(owner)

    def get_total_supply(self) -> int:
        return self.state.total_supply

    def get_allowance(self, owner: Principal | None, spender: Principal | None) -> int:
        return self.state.allowance_of(owner, spender)

    def get_name(self) -> str:
        return self.state.name

    def get_symbol(self) -> str:
        return self.state.symbol

    def get_decimals(self) -> int:
        return self.state.decimals

    def get_vault(self) -> Principal | None:
        return self.state.vault_ref

    def is_enabled(self) -> bool:
        return self.state.contract_enabled

    def get_event(self, event_id: int) -> Event | None:
        return self.events.get(event_id)

    # --- Transactional -----------------------------------------------------

    def checkpoint(self) -> tuple:
        return copy.deepcopy(self.state), self.events.last_event_id

    def rollback(self, checkpoint: tuple) -> None:
        state, last_event_id = checkpoint
        self.state = state
        self.events.truncate(last_event_id)

    # --- Snapshot ----------------------------------------------------------

    def state_snapshot(self) -> dict:
        """State tables only, JSON-safe."""
        return share_ledger_to_snapshot(self.state)

    def snapshot(self) -> dict:
        return {**self.state_snapshot(), "events": self.events.to_snapshot()}

    def restore(self, snapshot: dict) -> None:
        self.state = share_ledger_from_snapshot(snapshot)
        self.events.load_snapshot(snapshot.get("events", []))
