"""Ledger Snapshot — serialization / deserialization for the ledger states.

Invariants:
    - *_to_snapshot produces a JSON-safe dict (no tuples as keys, no Enums, no int keys)
    - *_from_snapshot reconstructs an equal state from any snapshot it produced
    - Missing keys fall back to the dataclass defaults (forward-compatible)

Design Decisions:
    - Maps with non-string keys are stored as lists of rows so JSON columns
      and in-process rollback share one format
    - The same snapshots back atomic() rollback and database persistence
"""

from mosaic.core.custody_state import AssetHolding, CustodyState
from mosaic.core.domain_types import (
    DEFAULT_MAX_PORTFOLIO_FEE, DEFAULT_SHARE_DECIMALS, MAX_SUPPLY,
    AssetId, PortfolioId, Principal, StrategyId,
)
from mosaic.core.registry_state import (
    ManagerPermission, Portfolio, RegistryState, Strategy,
)
from mosaic.core.share_ledger_state import ShareLedgerState


# ─── Registry ───────────────────────────────────────────────────

def registry_to_snapshot(state: RegistryState) -> dict:
    """Serialize RegistryState to a JSON-safe dict. Pure, no IO."""
    return {
        "admin": state.admin,
        "contract_enabled": state.contract_enabled,
        "portfolio_count": state.portfolio_count,
        "max_portfolio_fee": state.max_portfolio_fee,
        "portfolios": [
            {"portfolio_id": pid, **vars(p)}
            for pid, p in sorted(state.portfolios.items())
        ],
        "manager_permissions": [
            {"manager": manager, **vars(perm)}
            for manager, perm in sorted(state.manager_permissions.items())
        ],
        "strategies": [
            {"strategy_id": sid, **vars(s)}
            for sid, s in sorted(state.strategies.items())
        ],
    }


def registry_from_snapshot(data: dict) -> RegistryState:
    state = RegistryState(
        admin=Principal(data["admin"]),
        contract_enabled=data.get("contract_enabled", True),
        portfolio_count=data.get("portfolio_count", 0),
        max_portfolio_fee=data.get("max_portfolio_fee", DEFAULT_MAX_PORTFOLIO_FEE),
    )
    for row in data.get("portfolios", []):
        row = dict(row)
        pid = PortfolioId(row.pop("portfolio_id"))
        state.portfolios[pid] = Portfolio(**row)
    for row in data.get("manager_permissions", []):
        row = dict(row)
        manager = Principal(row.pop("manager"))
        state.manager_permissions[manager] = ManagerPermission(**row)
    for row in data.get("strategies", []):
        row = dict(row)
        sid = StrategyId(row.pop("strategy_id"))
        state.strategies[sid] = Strategy(**row)
    return state


# ─── Share ledger ───────────────────────────────────────────────

def share_ledger_to_snapshot(state: ShareLedgerState) -> dict:
    return {
        "principal": state.principal,
        "manager": state.manager,
        "name": state.name,
        "symbol": state.symbol,
        "decimals": state.decimals,
        "max_supply": state.max_supply,
        "vault_ref": state.vault_ref,
        "contract_enabled": state.contract_enabled,
        "total_supply": state.total_supply,
        "balances": [[owner, amount] for owner, amount in sorted(state.balances.items())],
        "allowances": [
            [owner, spender, amount]
            for (owner, spender), amount in sorted(state.allowances.items())
        ],
    }


def share_ledger_from_snapshot(data: dict) -> ShareLedgerState:
    vault_ref = data.get("vault_ref")
    return ShareLedgerState(
        principal=Principal(data["principal"]),
        manager=Principal(data["manager"]),
        name=data.get("name", ""),
        symbol=data.get("symbol", ""),
        decimals=data.get("decimals", DEFAULT_SHARE_DECIMALS),
        max_supply=data.get("max_supply", MAX_SUPPLY),
        vault_ref=Principal(vault_ref) if vault_ref else None,
        contract_enabled=data.get("contract_enabled", True),
        total_supply=data.get("total_supply", 0),
        balances={Principal(o): a for o, a in data.get("balances", [])},
        allowances={
            (Principal(o), Principal(s)): a for o, s, a in data.get("allowances", [])
        },
    )


# ─── Custody ledger ─────────────────────────────────────────────

def custody_to_snapshot(state: CustodyState) -> dict:
    return {
        "principal": state.principal,
        "manager": state.manager,
        "portfolio_id": state.portfolio_id,
        "share_ledger_ref": state.share_ledger_ref,
        "contract_enabled": state.contract_enabled,
        "total_value_locked": state.total_value_locked,
        "investor_balances": [
            [investor, amount] for investor, amount in sorted(state.investor_balances.items())
        ],
        "assets": [
            [asset_id, holding.asset_contract, holding.amount]
            for asset_id, holding in sorted(state.assets.items())
        ],
    }


def custody_from_snapshot(data: dict) -> CustodyState:
    share_ref = data.get("share_ledger_ref")
    return CustodyState(
        principal=Principal(data["principal"]),
        manager=Principal(data["manager"]),
        portfolio_id=PortfolioId(data.get("portfolio_id", 0)),
        share_ledger_ref=Principal(share_ref) if share_ref else None,
        contract_enabled=data.get("contract_enabled", True),
        total_value_locked=data.get("total_value_locked", 0),
        investor_balances={Principal(i): a for i, a in data.get("investor_balances", [])},
        assets={
            AssetId(aid): AssetHolding(Principal(contract), amount)
            for aid, contract, amount in data.get("assets", [])
        },
    )
