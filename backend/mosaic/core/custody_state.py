"""Custody State — investor balances and manager-curated asset holdings.

Invariants:
    - sum(investor_balances.values()) == total_value_locked
    - portfolio_id == 0 means the vault is not yet bound to a portfolio
    - AssetHolding.amount > 0 while present; removed holdings are deleted
"""

from dataclasses import dataclass, field

from mosaic.core.domain_types import AssetId, PortfolioId, Principal


@dataclass
class AssetHolding:
    asset_contract: Principal | None = None
    amount: int = 0


@dataclass
class CustodyState:
    """Per-vault context — pure dataclass, no IO."""

    principal: Principal
    manager: Principal
    portfolio_id: PortfolioId = PortfolioId(0)
    share_ledger_ref: Principal | None = None
    contract_enabled: bool = True
    total_value_locked: int = 0

    investor_balances: dict[Principal, int] = field(default_factory=dict)
    assets: dict[AssetId, AssetHolding] = field(default_factory=dict)

    def balance_of(self, investor: Principal | None) -> int:
        if investor is None:
            return 0
        return self.investor_balances.get(investor, 0)

    @property
    def is_bound(self) -> bool:
        return self.share_ledger_ref is not None
