"""Share Ledger State — balances and allowances for one portfolio's shares.

Invariants:
    - sum(balances.values()) == total_supply <= max_supply
    - Allowances keyed by (owner, spender); spending never drives one below 0
    - Zero balances are retained, not deleted
"""

from dataclasses import dataclass, field

from mosaic.core.domain_types import DEFAULT_SHARE_DECIMALS, MAX_SUPPLY, Principal


@dataclass
class ShareLedgerState:
    """Per-token context — pure dataclass, no IO."""

    principal: Principal
    manager: Principal
    name: str = ""
    symbol: str = ""
    decimals: int = DEFAULT_SHARE_DECIMALS
    max_supply: int = MAX_SUPPLY

    vault_ref: Principal | None = None
    contract_enabled: bool = True
    total_supply: int = 0

    balances: dict[Principal, int] = field(default_factory=dict)
    allowances: dict[tuple[Principal, Principal], int] = field(default_factory=dict)

    def balance_of(self, owner: Principal | None) -> int:
        if owner is None:
            return 0
        return self.balances.get(owner, 0)

    def allowance_of(self, owner: Principal | None, spender: Principal | None) -> int:
        if owner is None or spender is None:
            return 0
        return self.allowances.get((owner, spender), 0)

    @property
    def supply_headroom(self) -> int:
        return self.max_supply - self.total_supply
