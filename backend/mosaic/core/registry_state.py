"""Registry State — portfolio, manager and strategy tables plus the registry context.

Invariants:
    - Portfolio ids are allocated sequentially from 1; portfolio_count is the last one
    - portfolios_created <= max_portfolios for every manager permission
    - Strategies are immutable once registered, except is_approved
    - Absent keys read as the empty record (empty name, None identity, zero counters)

Design Decisions:
    - Dataclass with computed properties: pure, deterministic, testable without mocks
    - Context fields (admin, enabled flag, counters) held per instance, not module globals
"""

from dataclasses import dataclass, field

from mosaic.core.domain_types import (
    DEFAULT_MAX_PORTFOLIO_FEE, Principal, PortfolioId, StrategyId,
)


@dataclass
class Portfolio:
    name: str = ""
    manager: Principal | None = None
    vault_ref: Principal | None = None
    token_ref: Principal | None = None
    created_at: int = 0
    management_fee_bp: int = 0
    performance_fee_bp: int = 0
    strategy_id: StrategyId | None = None
    is_active: bool = False


@dataclass
class ManagerPermission:
    can_create: bool = False
    max_portfolios: int = 0
    portfolios_created: int = 0

    @property
    def has_quota(self) -> bool:
        return self.can_create and self.portfolios_created < self.max_portfolios


@dataclass
class Strategy:
    description: str = ""
    creator: Principal | None = None
    is_approved: bool = False


@dataclass
class RegistryState:
    """Per-registry context — pure dataclass, no IO."""

    admin: Principal
    contract_enabled: bool = True
    portfolio_count: int = 0
    max_portfolio_fee: int = DEFAULT_MAX_PORTFOLIO_FEE

    portfolios: dict[PortfolioId, Portfolio] = field(default_factory=dict)
    manager_permissions: dict[Principal, ManagerPermission] = field(default_factory=dict)
    strategies: dict[StrategyId, Strategy] = field(default_factory=dict)

    @property
    def next_portfolio_id(self) -> PortfolioId:
        return PortfolioId(self.portfolio_count + 1)

    def permission_for(self, manager: Principal | None) -> ManagerPermission:
        if manager is None:
            return ManagerPermission()
        return self.manager_permissions.get(manager, ManagerPermission())

    def strategy_exists(self, strategy_id: int) -> bool:
        return strategy_id in self.strategies
