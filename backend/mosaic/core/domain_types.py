"""Domain Types — rich types that replace bare primitives across the ledgers.

Invariants:
    - Principal wraps str; the absent identity is None, never a sentinel string
    - PortfolioId, StrategyId, AssetId, EventId wrap int — all unsigned 128-bit
    - All valid tags encoded as Enums — no raw string matching in the core

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (event logs, snapshots)
    - LEGACY_NULL_PRINCIPAL is recognised only at the wire boundary (as_principal)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Principal = NewType("Principal", str)
PortfolioId = NewType("PortfolioId", int)
StrategyId = NewType("StrategyId", int)
AssetId = NewType("AssetId", int)
EventId = NewType("EventId", int)

LEGACY_NULL_PRINCIPAL = "SP000000000000000000002Q6VF78"


# ─── Numeric Bounds ──────────────────────────────────────────────

UINT128_MAX = 2**128 - 1
BASIS_POINTS_MAX = 10_000            # 100%
DEFAULT_MAX_PORTFOLIO_FEE = 1_000    # 10%
MAX_SUPPLY = 1_000_000_000_000
DEFAULT_SHARE_DECIMALS = 6
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 256


# ─── Enums ───────────────────────────────────────────────────────

class LedgerKind(str, Enum):
    """Component that owns a table set and an event log."""
    REGISTRY = "registry"
    SHARES = "shares"
    CUSTODY = "custody"
    VALUE = "value"


class EventType(str, Enum):
    """Event tags written to the per-ledger audit logs."""
    # Registry
    CONTRACT_ENABLED = "contract-enabled"
    CONTRACT_DISABLED = "contract-disabled"
    MAX_FEE_UPDATED = "max-fee-updated"
    MANAGER_APPROVED = "manager-approved"
    PORTFOLIO_CREATED = "portfolio-created"
    PORTFOLIO_ACTIVATED = "portfolio-activated"
    PORTFOLIO_DEACTIVATED = "portfolio-deactivated"
    STRATEGY_REGISTERED = "strategy-registered"
    STRATEGY_APPROVED = "strategy-approved"
    # Share ledger
    TOKEN_ENABLED = "token-enabled"
    TOKEN_DISABLED = "token-disabled"
    MINT = "mint"
    BURN = "burn"
    TRANSFER = "transfer"
    APPROVE = "approve"
    TRANSFER_FROM = "transfer-from"
    # Custody ledger (vault-initialized is shared with the share ledger)
    VAULT_INITIALIZED = "vault-initialized"
    VAULT_ENABLED = "vault-enabled"
    VAULT_DISABLED = "vault-disabled"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    ASSET_ADDED = "asset-added"
    ASSET_REMOVED = "asset-removed"


def as_principal(value: str | None) -> Principal | None:
    """Normalise a wire-level identity. Empty and legacy-null map to None."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == LEGACY_NULL_PRINCIPAL:
        return None
    return Principal(value)


def is_uint(value: int) -> bool:
    """Whether value fits the unsigned 128-bit range."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= UINT128_MAX
